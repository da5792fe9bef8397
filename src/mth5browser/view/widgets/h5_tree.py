"""
HDF5 Tree Widget
Shows a digested H5Node tree as groups, datasets and attributes.
"""
import logging
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QStyle, QTreeWidget, QTreeWidgetItem

from mth5browser.config import get_icon
from mth5browser.model.labels import attribute_label, dataset_label, display_order, sorted_attributes
from mth5browser.model.nodes import ATTRIBUTE, DATASET, GROUP, H5Node, TreeItemData
from mth5browser.model.paths import safe_text

logger = logging.getLogger(__name__)

ITEM_DATA_ROLE = Qt.UserRole


class H5TreeWidget(QTreeWidget):
    # Emitted with the TreeItemData of the newly selected item
    item_selected = Signal(object)

    # Qt fallbacks when no icon file is found in the assets
    FALLBACK_ICONS = {
        GROUP: QStyle.SP_DirIcon,
        DATASET: QStyle.SP_FileIcon,
        ATTRIBUTE: QStyle.SP_FileDialogInfoView,
    }

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setHeaderHidden(True)
        self.setColumnCount(1)
        self.setUniformRowHeights(True)

        self._icons: dict[str, QIcon] = {}

        self.itemSelectionChanged.connect(self._on_selection_changed)

    def populate(self, tree: H5Node) -> None:
        """Clear the widget and rebuild it from a digested tree."""
        self.blockSignals(True)
        try:
            self.clear()

            root_item = QTreeWidgetItem(self, ["/"])
            root_item.setIcon(0, self._icon(GROUP))
            root_item.setData(0, ITEM_DATA_ROLE, TreeItemData(kind=GROUP, path="/", name="/"))

            self._add_children(root_item, tree)
            root_item.setExpanded(True)
        finally:
            self.blockSignals(False)

        logger.debug(f"Tree populated with {self._count_items()} items.")

    def clear_tree(self) -> None:
        self.clear()

    def selected_data(self) -> Optional[TreeItemData]:
        items = self.selectedItems()
        if not items:
            return None
        return items[0].data(0, ITEM_DATA_ROLE)

    # --- BUILDING ---

    def _add_children(self, parent_item: QTreeWidgetItem, node: H5Node) -> None:
        # 1. Attributes (sorted by name)
        for attr in sorted_attributes(node.attrs):
            item = QTreeWidgetItem(parent_item, [attribute_label(attr.name, attr.value)])
            item.setIcon(0, self._icon(ATTRIBUTE))
            item.setData(0, ITEM_DATA_ROLE, TreeItemData(
                kind=ATTRIBUTE,
                path=attr.path,
                name=safe_text(attr.name),
                owner_path=safe_text(node.path),
                value=attr.value,
            ))

        # 2. Children (groups + datasets), sorted by the name the user sees
        for child in display_order(node.children):
            if child.is_group:
                item = QTreeWidgetItem(parent_item, [safe_text(child.name)])
                item.setIcon(0, self._icon(GROUP))
                item.setData(0, ITEM_DATA_ROLE, TreeItemData(
                    kind=GROUP, path=safe_text(child.path), name=safe_text(child.name)
                ))
            elif child.is_dataset:
                item = QTreeWidgetItem(parent_item, [dataset_label(child)])
                item.setIcon(0, self._icon(DATASET))
                item.setData(0, ITEM_DATA_ROLE, TreeItemData(
                    kind=DATASET, path=safe_text(child.path), name=safe_text(child.name), meta=child.meta
                ))
            else:
                continue

            self._add_children(item, child)

    def _icon(self, kind: str) -> QIcon:
        if kind not in self._icons:
            path = get_icon(kind)
            if path:
                self._icons[kind] = QIcon(path)
            else:
                self._icons[kind] = self.style().standardIcon(self.FALLBACK_ICONS[kind])
        return self._icons[kind]

    def _count_items(self) -> int:
        count = 0
        stack = [self.topLevelItem(i) for i in range(self.topLevelItemCount())]
        while stack:
            item = stack.pop()
            count += 1
            stack.extend(item.child(i) for i in range(item.childCount()))
        return count

    # --- SLOTS ---

    def _on_selection_changed(self) -> None:
        data = self.selected_data()
        if data is not None:
            self.item_selected.emit(data)
