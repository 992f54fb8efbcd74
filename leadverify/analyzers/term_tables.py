"""Fixed term tables for document distress detection. Matching is
case-insensitive substring search over the concatenated corpus."""

from leadverify.models import DocumentType

LEGAL_STATUS_TERMS: dict[str, tuple[str, ...]] = {
    "foreclosure": ("foreclosure", "notice of default", "trustee sale", "sheriff sale", "auction", "repossession"),
    "bankruptcy": ("bankruptcy", "chapter 7", "chapter 13", "insolvency", "debtor", "creditor"),
    "probate": ("probate", "deceased", "estate", "heir", "executor", "will", "inheritance"),
    "divorce": ("divorce", "dissolution", "marital settlement", "separation agreement"),
    "tax_lien": ("tax lien", "delinquent taxes", "unpaid taxes", "tax sale"),
    "mechanics_lien": ("mechanic's lien", "contractor lien", "construction lien", "unpaid work"),
}

FINANCIAL_TERMS: dict[str, tuple[str, ...]] = {
    "distress": ("behind on payments", "default", "delinquent", "past due", "overdue", "collections"),
    "hardship": ("job loss", "medical bills", "hardship", "financial difficulty", "can't afford"),
    "urgency": ("need to sell", "must sell", "quick sale", "immediate", "urgent", "time-sensitive"),
}

MOTIVATION_TERMS: dict[str, tuple[str, ...]] = {
    "relocation": ("relocation", "job transfer", "moving", "relocating", "new job"),
    "investment": ("investment property", "rental property", "no longer want to be landlord"),
    "life_change": ("retirement", "downsizing", "empty nest", "growing family", "divorce"),
    "property_issues": ("repairs", "renovation", "fixer-upper", "problem property", "code violations"),
}

# Confidence weight per document type; unknown types fall back to DEFAULT_TYPE_WEIGHT
DOCUMENT_TYPE_WEIGHTS: dict[DocumentType, float] = {
    DocumentType.FORECLOSURE: 1.0,
    DocumentType.BANKRUPTCY: 1.0,
    DocumentType.PROBATE: 0.9,
    DocumentType.LIEN: 0.8,
    DocumentType.AUCTION: 0.8,
    DocumentType.TAX: 0.7,
    DocumentType.DEED: 0.6,
    DocumentType.DIVORCE: 0.6,
    DocumentType.PERMIT: 0.5,
    DocumentType.LISTING: 0.4,
}
DEFAULT_TYPE_WEIGHT = 0.3

LEGAL_ISSUE_WEIGHTS: dict[str, float] = {
    "foreclosure": 1.0,
    "bankruptcy": 0.9,
    "tax_lien": 0.8,
    "probate": 0.7,
    "divorce": 0.6,
    "mechanics_lien": 0.5,
}
DEFAULT_LEGAL_WEIGHT = 0.3

# Characters of content at which a document contributes full confidence
FULL_CONFIDENCE_LENGTH = 1000
