from cardledger.models.card import (
    Card,
    CardDraft,
    CardStatus,
    GradingCompany,
    parse_card_date,
    parse_money,
)
from cardledger.models.failure import (
    CardLimitExceededError,
    CardValidationError,
    CollectionNotEmptyError,
    FailureDetail,
    FailureKind,
    KnownError,
    MainCollectionProtectedError,
    NotFoundError,
    PremiumRequiredError,
    SpreadsheetImportError,
    UploadRejectedError,
)
from cardledger.models.stats import (
    CardStats,
    CategoryInvestment,
    CategoryProfit,
    CategoryRoi,
    MonthlySales,
    ValuationPoint,
)

__all__ = [
    "Card",
    "CardDraft",
    "CardLimitExceededError",
    "CardStats",
    "CardStatus",
    "CardValidationError",
    "CategoryInvestment",
    "CategoryProfit",
    "CategoryRoi",
    "CollectionNotEmptyError",
    "FailureDetail",
    "FailureKind",
    "GradingCompany",
    "KnownError",
    "MainCollectionProtectedError",
    "MonthlySales",
    "NotFoundError",
    "PremiumRequiredError",
    "SpreadsheetImportError",
    "UploadRejectedError",
    "ValuationPoint",
    "parse_card_date",
    "parse_money",
]
