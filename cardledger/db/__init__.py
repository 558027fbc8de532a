from cardledger.db.database import get_session, init_db
from cardledger.db.operations import (
    FREE_PLAN,
    PREMIUM_PLAN,
    cancel_subscription,
    card_to_model,
    collection_has_cards,
    count_cards,
    count_collection_cards,
    create_card,
    create_cards,
    create_collection,
    delete_card,
    delete_collection,
    ensure_categories,
    ensure_main_collection,
    ensure_subscription_types,
    get_active_subscription,
    get_card,
    get_collection,
    get_subscription_type,
    list_cards,
    list_categories,
    list_collections,
    list_subscription_types,
    mark_card_sold,
    seed_reference_data,
    start_subscription,
    update_card,
    update_collection,
)

__all__ = [
    "FREE_PLAN",
    "PREMIUM_PLAN",
    "cancel_subscription",
    "card_to_model",
    "collection_has_cards",
    "count_cards",
    "count_collection_cards",
    "create_card",
    "create_cards",
    "create_collection",
    "delete_card",
    "delete_collection",
    "ensure_categories",
    "ensure_main_collection",
    "ensure_subscription_types",
    "get_active_subscription",
    "get_card",
    "get_collection",
    "get_session",
    "get_subscription_type",
    "init_db",
    "list_cards",
    "list_categories",
    "list_collections",
    "list_subscription_types",
    "mark_card_sold",
    "seed_reference_data",
    "start_subscription",
    "update_card",
    "update_collection",
]
