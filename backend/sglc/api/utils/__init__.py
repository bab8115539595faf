# API Utilities - DRY Helpers
from sglc.api.utils.db_helpers import get_by_id, validate_unique
from sglc.api.utils.pagination import paginate_query, pagination_meta, apply_search_filter, apply_filters
from sglc.api.utils.sequencers import gerar_numero_sequencial, prefixo_do_tipo, Prefixos
from sglc.api.utils.updates import update_entity, snapshot
from sglc.api.utils.status import forbid_status

__all__ = [
    # db_helpers
    "get_by_id",
    "validate_unique",
    # pagination
    "paginate_query",
    "pagination_meta",
    "apply_search_filter",
    "apply_filters",
    # sequencers
    "gerar_numero_sequencial",
    "prefixo_do_tipo",
    "Prefixos",
    # updates
    "update_entity",
    "snapshot",
    # status
    "forbid_status",
]
