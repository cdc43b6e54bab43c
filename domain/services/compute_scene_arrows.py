from __future__ import annotations

from domain.models import ArrowStyle, ComputedArrow, SceneDocument
from domain.services.arrow_container import ArrowContainer, ArrowElement


class ComputeSceneArrows:
    """One layout pass over a scene file: every declared relation becomes a path."""

    def __init__(
        self,
        base_style: ArrowStyle | None = None,
        container_id: str | None = None,
    ) -> None:
        self.base_style = base_style or ArrowStyle()
        self.container_id = container_id

    def compute(self, scene: SceneDocument) -> list[ComputedArrow]:
        container = self.build_container(scene)
        return container.compute_arrows(scene.rectangles())

    def build_container(self, scene: SceneDocument) -> ArrowContainer:
        container = ArrowContainer(
            style=self.base_style.merged(scene.style),
            container_id=self.container_id,
        )
        for element in scene.elements:
            if element.relations:
                ArrowElement(element.id, element.relations, container)
        return container
