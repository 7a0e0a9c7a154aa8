from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from semantic_architect.models.graph import GraphNode, KnowledgeGraph

EXCLUDED_NODE_TYPES = frozenset(
    {
        "Cookie",
        "Cookie Category",
        "Service",
        "Consent Management Platform",
        "Action",
        "Feature",
        "Document",
        "Language",
        "Navigation",
        "Menu",
        "Button",
        "Link",
        "Form",
        "Input",
        "Page Element",
        "Web Component",
        "UI Element",
    }
)

EXCLUDED_NODE_LABELS = (
    # Technology vendors outside the business domain
    "Amazon",
    "Google",
    "Meta Platforms, Inc.",
    "Meta Platforms",
    "Meta",
    "Facebook",
    "Microsoft",
    "Apple",
    "Adobe",
    # Site platforms and tracking services
    "Edrone",
    "Cookiebot",
    "Google Analytics",
    "Google Tag Manager",
    "PrestaShop",
    "WordPress",
    "Magento",
    "Shopify",
    "WooCommerce",
    "PayPal",
    "Stripe",
    "Vuex",
    "React",
    "Angular",
    "jQuery",
    # Site actions, navigation and legal boilerplate
    "Zarejestruj się",
    "Zaloguj się",
    "Zaloguj",
    "Logowanie",
    "Rejestracja",
    "Koszyk",
    "Dodaj do koszyka",
    "Kup teraz",
    "Zamów",
    "Kontakt",
    "O nas",
    "Regulamin",
    "Polityka prywatności",
    "Polityka prywatności i cookies",
    "Cookies",
    "RODO",
    "GDPR",
    "Warunki użytkowania",
    "Mapa strony",
    "Sitemap",
    "Newsletter",
    "Subskrypcja",
    "FAQ",
    "Pomoc",
    "Wsparcie",
    "Support",
    "Blog",
    "Aktualności",
    "News",
    "Promocje",
    "Rabaty",
    "Oferta specjalna",
    # Languages and countries
    "polski",
    "Polska",
    "English",
    "Poland",
    "język polski",
    "polszczyzna",
    # Cookie names and session identifiers
    "_ga",
    "_gid",
    "_gat",
    "_fbp",
    "PHPSESSID",
    "JSESSIONID",
    "session_id",
    "csrf_token",
    "xsrf_token",
    "_csrf",
    "cookieconsent_status",
    "cookie_consent",
    # UI chrome
    "Menu",
    "Navigation",
    "Footer",
    "Header",
    "Sidebar",
    "Search",
    "Szukaj",
    "Filter",
    "Filtr",
    "Sort",
    "Sortuj",
    "Login",
    "Register",
    "Cart",
    "Checkout",
)

_EXCLUDED_LABELS_LOWER = tuple(dict.fromkeys(label.lower() for label in EXCLUDED_NODE_LABELS))


def is_noise_node(node: GraphNode) -> bool:
    if node.type in EXCLUDED_NODE_TYPES:
        return True

    label = node.label.lower().strip()
    # Substring match, so "Google Ads" and "polityka cookies" are dropped too.
    if any(excluded in label for excluded in _EXCLUDED_LABELS_LOWER):
        return True

    if len(label) <= 1:
        return True

    # Short identifiers with underscores look like cookie or variable names.
    if "_" in label and len(label) < 10:
        return True

    return False


def filter_graph(fragment: KnowledgeGraph) -> KnowledgeGraph:
    """Return a new fragment without noise nodes or edges touching them."""
    nodes = [node for node in fragment.nodes if not is_noise_node(node)]
    allowed_ids = {node.id for node in nodes}
    edges = [
        edge
        for edge in fragment.edges
        if edge.source in allowed_ids and edge.target in allowed_ids
    ]
    return KnowledgeGraph(nodes=nodes, edges=edges)


@dataclass(frozen=True, slots=True)
class CleaningStats:
    nodes_removed: int
    edges_removed: int
    nodes_kept: int
    edges_kept: int
    nodes_filtered_percent: int
    edges_filtered_percent: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _percent(removed: int, total: int) -> int:
    if total <= 0:
        return 0
    return int(removed * 100 / total + 0.5)


def cleaning_stats(original: KnowledgeGraph, filtered: KnowledgeGraph) -> CleaningStats:
    original_nodes = len(original.nodes)
    original_edges = len(original.edges)
    kept_nodes = len(filtered.nodes)
    kept_edges = len(filtered.edges)
    return CleaningStats(
        nodes_removed=original_nodes - kept_nodes,
        edges_removed=original_edges - kept_edges,
        nodes_kept=kept_nodes,
        edges_kept=kept_edges,
        nodes_filtered_percent=_percent(original_nodes - kept_nodes, original_nodes),
        edges_filtered_percent=_percent(original_edges - kept_edges, original_edges),
    )
