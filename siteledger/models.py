from __future__ import annotations

from enum import Enum


# ---------- Enums ----------

class EntryKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    DEFERRED = "DEFERRED"
    TRANSFER_IN = "TRANSFER_IN"


class LedgerCategory(str, Enum):
    FUND_TRANSFER = "FUND_TRANSFER"
    WORKER_WAGES = "WORKER_WAGES"
    MATERIALS = "MATERIALS"
    TRANSPORTATION = "TRANSPORTATION"
    MISCELLANEOUS = "MISCELLANEOUS"
    INTER_PROJECT_TRANSFER = "INTER_PROJECT_TRANSFER"
    WORKER_TRANSFERS = "WORKER_TRANSFERS"
    UNKNOWN = "UNKNOWN"


class SourceKind(str, Enum):
    ATTENDANCE = "ATTENDANCE"
    MATERIAL_PURCHASE = "MATERIAL_PURCHASE"
    TRANSPORTATION = "TRANSPORTATION"
    MISC_EXPENSE = "MISC_EXPENSE"
    FUND_TRANSFER = "FUND_TRANSFER"
    PROJECT_TRANSFER = "PROJECT_TRANSFER"
    WORKER_TRANSFER = "WORKER_TRANSFER"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    HALF_DAY = "half_day"
    ABSENT = "absent"


class PaymentStatus(str, Enum):
    FULLY_PAID = "FULLY_PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    UNPAID = "UNPAID"


class ReportKind(str, Enum):
    DAILY_EXPENSES = "DAILY_EXPENSES"
    WORKER_STATEMENT = "WORKER_STATEMENT"


# Kinds that move cash into the project balance.
INFLOW_KINDS = frozenset({EntryKind.INCOME, EntryKind.TRANSFER_IN})

# Display labels used by the statement renderers.
CATEGORY_LABELS: dict[LedgerCategory, str] = {
    LedgerCategory.FUND_TRANSFER: "تحويل عهدة",
    LedgerCategory.WORKER_WAGES: "أجور العمال",
    LedgerCategory.MATERIALS: "مشتريات المواد",
    LedgerCategory.TRANSPORTATION: "نقل ومواصلات",
    LedgerCategory.MISCELLANEOUS: "مصاريف متنوعة",
    LedgerCategory.INTER_PROJECT_TRANSFER: "ترحيل بين المشاريع",
    LedgerCategory.WORKER_TRANSFERS: "حوالات العمال",
    LedgerCategory.UNKNOWN: "غير محدد",
}

KIND_LABELS: dict[EntryKind, str] = {
    EntryKind.INCOME: "دخل",
    EntryKind.EXPENSE: "مصروف",
    EntryKind.DEFERRED: "آجل",
    EntryKind.TRANSFER_IN: "ترحيل وارد",
}

PAYMENT_STATUS_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.FULLY_PAID: "مدفوع بالكامل",
    PaymentStatus.PARTIALLY_PAID: "مدفوع جزئياً",
    PaymentStatus.UNPAID: "غير مدفوع",
}

ATTENDANCE_LABELS: dict[AttendanceStatus, str] = {
    AttendanceStatus.PRESENT: "حاضر",
    AttendanceStatus.HALF_DAY: "نصف يوم",
    AttendanceStatus.ABSENT: "غائب",
}


__all__ = [
    "EntryKind",
    "LedgerCategory",
    "SourceKind",
    "AttendanceStatus",
    "PaymentStatus",
    "ReportKind",
    "INFLOW_KINDS",
    "CATEGORY_LABELS",
    "KIND_LABELS",
    "PAYMENT_STATUS_LABELS",
    "ATTENDANCE_LABELS",
]
