"""
Page Presets

Starter trees for new pages. Each preset builds a fresh tree on every call,
so two pages created from the same preset never share node ids.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from page_builder.models.contracts.nodes import Node, Page
from page_builder.services.node_catalog import DEFAULT_CATALOG, NodeCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Preset:
    """A named page template."""

    id: str
    label: str
    description: str
    build: Callable[[NodeCatalog], Node]
    tags: list[str] = field(default_factory=list)


def _node(
    catalog: NodeCatalog,
    kind: str,
    props: dict[str, Any] | None = None,
    children: list[Node] | None = None,
) -> Node:
    node = catalog.create_node(kind, props)
    if children is not None:
        node = node.model_copy(update={"children": children})
    return node


def _stat_card(catalog: NodeCatalog, title: str, value: str) -> Node:
    return _node(catalog, "card", {"title": title}, [
        _node(catalog, "heading", {"content": value, "level": 3}),
    ])


def _build_empty(catalog: NodeCatalog) -> Node:
    return _node(catalog, "stack", {"gap": "24px"}, [])


def _build_dashboard(catalog: NodeCatalog) -> Node:
    return _node(catalog, "stack", {"gap": "24px"}, [
        _node(catalog, "row", {"gap": "12px", "align": "center", "justify": "space-between"}, [
            _node(catalog, "heading", {"content": "Dashboard", "level": 1}),
            _node(catalog, "button", {"label": "Nova ação", "variant": "primary"}),
        ]),
        _node(catalog, "grid", {"columns": 4, "gap": "16px"}, [
            _stat_card(catalog, "Total", "{{stats.total | number}}"),
            _stat_card(catalog, "Ativos", "{{stats.active | number}}"),
            _stat_card(catalog, "Pendentes", "{{stats.pending | number}}"),
            _stat_card(catalog, "Taxa", "{{stats.rate | percent}}"),
        ]),
        _node(catalog, "table", {
            "dataSource": "items",
            "columns": [
                {"key": "name", "label": "Nome", "width": "30%"},
                {"key": "status", "label": "Status", "width": "15%", "format": "badge"},
                {"key": "date", "label": "Data", "width": "20%", "format": "date"},
                {"key": "value", "label": "Valor", "width": "15%", "align": "right", "format": "currency"},
            ],
        }),
    ])


def _build_list(catalog: NodeCatalog) -> Node:
    return _node(catalog, "stack", {"gap": "20px"}, [
        _node(catalog, "row", {"gap": "12px", "align": "center", "justify": "space-between"}, [
            _node(catalog, "stack", {"gap": "4px"}, [
                _node(catalog, "heading", {"content": "Itens", "level": 1}),
                _node(catalog, "text", {"content": "{{items.length}} registros"}),
            ]),
            _node(catalog, "button", {"label": "Criar novo", "variant": "primary"}),
        ]),
        _node(catalog, "table", {
            "dataSource": "items",
            "columns": [
                {"key": "name", "label": "Nome", "width": "35%"},
                {"key": "type", "label": "Tipo", "width": "15%"},
                {"key": "status", "label": "Status", "width": "15%", "format": "badge"},
                {"key": "updated", "label": "Atualizado", "width": "20%", "format": "relative"},
            ],
        }),
    ])


def _build_detail(catalog: NodeCatalog) -> Node:
    return _node(catalog, "stack", {"gap": "24px"}, [
        _node(catalog, "row", {"gap": "12px", "align": "center", "justify": "space-between"}, [
            _node(catalog, "row", {"gap": "12px", "align": "center"}, [
                _node(catalog, "heading", {"content": "{{item.name}}", "level": 1}),
                _node(catalog, "badge", {"content": "{{item.status | badge}}", "color": "success"}),
            ]),
            _node(catalog, "row", {"gap": "8px", "align": "center"}, [
                _node(catalog, "button", {"label": "Editar", "variant": "outline"}),
                _node(catalog, "button", {"label": "Excluir", "variant": "destructive"}),
            ]),
        ]),
        _node(catalog, "grid", {"columns": 2, "gap": "16px"}, [
            _node(catalog, "card", {"title": "Informações"}, [
                _node(catalog, "text", {"content": "Criado em {{item.createdAt | date:long}}"}),
                _node(catalog, "text", {"content": "Responsável: {{item.owner | default:—}}"}),
            ]),
            _node(catalog, "card", {"title": "Métricas"}, [
                _node(catalog, "grid", {"columns": 2, "gap": "12px"}, [
                    _stat_card(catalog, "Execuções", "{{item.runs | number}}"),
                    _stat_card(catalog, "Taxa sucesso", "{{item.successRate | percent}}"),
                ]),
            ]),
        ]),
        _node(catalog, "divider"),
        _node(catalog, "container", {"padding": "16px"}, [
            _node(catalog, "table", {
                "dataSource": "history",
                "columns": [
                    {"key": "event", "label": "Evento", "width": "50%"},
                    {"key": "date", "label": "Data", "width": "50%", "format": "datetime"},
                ],
            }),
        ]),
    ])


PRESETS: dict[str, Preset] = {
    preset.id: preset
    for preset in [
        Preset("empty", "Vazia", "Página em branco com um stack", _build_empty, ["básico"]),
        Preset(
            "dashboard", "Dashboard", "Título, cards de métricas em grid, tabela principal",
            _build_dashboard, ["dados", "overview"],
        ),
        Preset(
            "list", "Lista", "Título com contagem, tabela de registros",
            _build_list, ["dados", "CRUD"],
        ),
        Preset(
            "detail", "Detalhe", "Header com ações, cards de informação, histórico",
            _build_detail, ["detalhe", "entidade"],
        ),
    ]
}


def list_presets() -> list[Preset]:
    return list(PRESETS.values())


def create_page_from_preset(
    preset_id: str,
    page_id: str,
    label: str,
    route: str,
    catalog: NodeCatalog = DEFAULT_CATALOG,
) -> Page:
    """
    Build a new page from a preset.

    Raises:
        KeyError: If the preset does not exist
    """
    preset = PRESETS[preset_id]
    logger.debug(f"Creating page {page_id} from preset {preset_id}")
    return Page(id=page_id, label=label, route=route, content=preset.build(catalog))
