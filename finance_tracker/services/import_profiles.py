"""
Import profiles: per-app CSV column mapping and row normalization.

A profile turns the loosely structured export of a third-party
finance app into NormalizedImportRow objects the ImportService
can feed to the ledger. Profiles are pure: they never touch the
database.

Each profile provides:
- infer_mapping(headers): guess which column holds which field
- normalize_row(mapped_row, default_currency): one row to a
  NormalizedImportRow, a TransferStub, or None (skip)
- finalize(items, default_currency): batch pass over all rows

Monefy records a transfer as two independent rows, one per
account. Its finalize pass pairs those legs back into a single
transfer, see pair_transfer_stubs().
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from finance_tracker.models.enums import TransactionType
from finance_tracker.schemas.imports import NormalizedImportRow, ImportErrorDetail
from finance_tracker.services.errors import ImportRowError, ReconciliationError

logger = logging.getLogger(__name__)

IGNORE = "ignore"
DAY_MS = 24 * 60 * 60 * 1000

_KEY_STRIP = re.compile(r"[^a-z0-9а-яё]")
_TRANSFER_TO = re.compile(r"^to\s+'(.+)'", re.IGNORECASE)
_TRANSFER_FROM = re.compile(r"^from\s+'(.+)'", re.IGNORECASE)


@dataclass
class TransferStub:
    """One leg of a transfer, waiting for its counterpart."""
    direction: str  # "out" or "in"
    date: int
    account: str
    other_account: str
    amount: Decimal
    currency: str
    converted_amount: Decimal | None = None
    converted_currency: str | None = None
    description: str = ""
    raw_row: dict = field(default_factory=dict)
    row_index: int | None = None


@dataclass
class ProfileOptions:
    delimiter: str = ","
    decimal_separator: str = "."
    thousands_separator: str = " "


# --- Parsing helpers ---

def normalize_key(value: str) -> str:
    """Lower-case and drop everything but latin/cyrillic letters and digits."""
    return _KEY_STRIP.sub("", value.lower())


def ensure_currency(value: str | None, fallback: str) -> str:
    normalized = (value or "").strip().upper()
    return normalized or fallback


def parse_amount(
    value: str | None,
    decimal_separator: str = ".",
    thousands_separator: str = " ",
) -> Decimal:
    """Parse a localized amount; blanks and garbage become zero."""
    if not value:
        return Decimal(0)
    normalized = value
    if thousands_separator:
        normalized = normalized.replace(thousands_separator, "")
    if decimal_separator == ",":
        normalized = normalized.replace(".", "").replace(",", ".")
    else:
        normalized = normalized.replace(",", ".", 1)
    normalized = re.sub(r"[^\d.-]", "", normalized)
    try:
        return Decimal(normalized)
    except InvalidOperation:
        return Decimal(0)


def parse_day_month_year(value: str | None) -> int:
    """Parse dd/mm/yyyy to epoch millis (UTC)."""
    try:
        parsed = datetime.strptime((value or "").strip(), "%d/%m/%Y")
    except ValueError:
        raise ImportRowError("invalid_date", f"Invalid date: {value}")
    return int(parsed.replace(tzinfo=timezone.utc).timestamp() * 1000)


def parse_iso_date(value: str | None) -> int:
    """Parse an ISO-like date or datetime to epoch millis (UTC if naive)."""
    try:
        parsed = datetime.fromisoformat((value or "").strip())
    except ValueError:
        raise ImportRowError("invalid_date", f"Invalid date: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _parse_plain_number(value: str | None) -> Decimal:
    text = (value or "").strip().replace(" ", "").replace(",", ".")
    if not text:
        return Decimal(0)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ImportRowError("invalid_amount", f"Invalid numeric amount: {value}")
    if not amount.is_finite():
        raise ImportRowError("invalid_amount", f"Invalid numeric amount: {value}")
    return amount


def _clean(value: str | None) -> str:
    return (value or "").strip()


# --- Pairing ---

def pair_transfer_stubs(
    stubs: list[TransferStub],
    allow_one_sided: bool = False,
) -> list[NormalizedImportRow]:
    """
    Recombine single-leg transfer stubs into transfer rows.

    For each unconsumed "out" stub, in input order, take the first
    unconsumed "in" stub whose (account, other_account) pair is the
    reverse of the out stub's and whose date is within one day.
    Greedy and order-dependent: no backtracking.

    An out stub without a partner becomes a transfer on its own when
    it carries a converted amount and currency. Any other leftover
    leg raises ReconciliationError, unless allow_one_sided is set,
    in which case leftover "in" legs are dropped.
    """
    used: set[int] = set()
    rows: list[NormalizedImportRow] = []

    for i, stub in enumerate(stubs):
        if i in used or stub.direction != "out":
            continue

        partner_index = next(
            (
                j for j, candidate in enumerate(stubs)
                if j != i
                and j not in used
                and candidate.direction == "in"
                and candidate.account == stub.other_account
                and candidate.other_account == stub.account
                and abs(candidate.date - stub.date) <= DAY_MS
            ),
            None,
        )

        if partner_index is not None:
            partner = stubs[partner_index]
            used.update((i, partner_index))
            rows.append(NormalizedImportRow(
                transaction_type=TransactionType.TRANSFER,
                date=stub.date,
                description=stub.description or partner.description or "",
                from_account_name=stub.account,
                to_account_name=partner.account,
                amount_sent=abs(stub.amount),
                amount_received=abs(partner.amount),
                from_account_currency=stub.currency,
                to_account_currency=partner.currency,
            ))
            continue

        if stub.converted_amount and stub.converted_currency:
            used.add(i)
            rows.append(NormalizedImportRow(
                transaction_type=TransactionType.TRANSFER,
                date=stub.date,
                description=stub.description or "",
                from_account_name=stub.account,
                to_account_name=stub.other_account,
                amount_sent=abs(stub.amount),
                amount_received=abs(stub.converted_amount),
                from_account_currency=stub.currency,
                to_account_currency=stub.converted_currency,
            ))
            continue

        logger.error(
            "Unpaired outgoing transfer %s -> %s at row %s",
            stub.account, stub.other_account, stub.row_index,
        )
        raise ReconciliationError(
            stub.account, stub.other_account, stub.date, stub.row_index
        )

    for i, stub in enumerate(stubs):
        if i in used or stub.direction != "in":
            continue
        if allow_one_sided:
            logger.warning(
                "Dropping one-sided incoming transfer %s -> %s at row %s",
                stub.other_account, stub.account, stub.row_index,
            )
            continue
        logger.error(
            "Unpaired incoming transfer %s -> %s at row %s",
            stub.other_account, stub.account, stub.row_index,
        )
        raise ReconciliationError(
            stub.other_account, stub.account, stub.date, stub.row_index
        )

    return rows


# --- Profiles ---

class ImportProfile:
    """Base profile: fuzzy header mapping and a pass-through finalize."""

    id: str = ""
    label: str = ""
    description: str | None = None
    options: ProfileOptions = ProfileOptions()
    # field -> header variants (besides the field name itself)
    field_variants: dict[str, list[str]] = {}
    allow_one_sided_transfers: bool = False

    @property
    def fields(self) -> list[str]:
        return list(self.field_variants)

    def infer_mapping(self, headers: list[str]) -> dict[str, str]:
        """
        Map each header to a known field or to "ignore".

        Headers and variants are compared after normalize_key().
        For each field the first matching header wins.
        """
        mapping = {header: IGNORE for header in headers}
        simplified = [(header, normalize_key(header)) for header in headers]

        for field_name, variants in self.field_variants.items():
            lookup = {normalize_key(field_name), *map(normalize_key, variants)}
            match = next(
                (header for header, key in simplified if key in lookup),
                None,
            )
            if match is not None:
                mapping[match] = field_name

        return mapping

    def apply_mapping(self, raw_row: dict, mapping: dict[str, str]) -> dict[str, str]:
        mapped: dict[str, str] = {}
        for header, field_name in mapping.items():
            if field_name == IGNORE or field_name in mapped:
                continue
            mapped[field_name] = raw_row.get(header) or ""
        return mapped

    def normalize_row(
        self, mapped_row: dict[str, str], default_currency: str
    ) -> NormalizedImportRow | TransferStub | None:
        raise NotImplementedError

    def normalize_rows(
        self,
        mapped_rows: list[dict[str, str]],
        default_currency: str,
    ) -> tuple[list, list[ImportErrorDetail]]:
        """
        Normalize every row. Row-level errors are collected rather
        than raised so one bad line does not sink the batch.
        """
        items: list[NormalizedImportRow | TransferStub] = []
        errors: list[ImportErrorDetail] = []

        for index, mapped_row in enumerate(mapped_rows):
            try:
                item = self.normalize_row(mapped_row, default_currency)
            except (ValueError, ArithmeticError) as e:
                # ImportRowError, pydantic ValidationError and decimal errors
                code = e.code if isinstance(e, ImportRowError) else "invalid_row"
                logger.warning("Row %d rejected by %s: %s", index, self.id, e)
                errors.append(ImportErrorDetail(
                    row_index=index, code=code, message=str(e),
                ))
                continue
            if item is None:
                continue
            if isinstance(item, TransferStub):
                item.row_index = index
            items.append(item)

        return items, errors

    def finalize(
        self,
        items: list,
        default_currency: str,
    ) -> list[NormalizedImportRow]:
        rows = [item for item in items if not isinstance(item, TransferStub)]
        stubs = [item for item in items if isinstance(item, TransferStub)]
        return rows + pair_transfer_stubs(stubs, self.allow_one_sided_transfers)


class ZenMoneyProfile(ImportProfile):
    """
    ZenMoney exports carry explicit outcome and income columns.
    A row with both is a transfer, so no pairing is needed.
    """

    id = "zenmoney"
    label = "ZenMoney"
    description = "Default behavior for ZenMoney CSV exports"
    options = ProfileOptions(delimiter=";")
    field_variants = {
        "date": ["дата"],
        "category_name": ["category", "категория"],
        "comment": ["описание", "note"],
        "outcome_account_name": ["account", "счет", "счёт"],
        "outcome": ["расход"],
        "outcome_currency": ["валюта"],
        "income_account_name": ["счет поступления", "счёт поступления"],
        "income": ["доход"],
        "income_currency": ["валюта поступления"],
    }

    def normalize_row(self, mapped_row, default_currency):
        date = parse_iso_date(mapped_row.get("date"))
        income = _parse_plain_number(mapped_row.get("income"))
        outcome = _parse_plain_number(mapped_row.get("outcome"))
        description = _clean(mapped_row.get("comment")) or "Imported Transaction"
        outcome_account = _clean(mapped_row.get("outcome_account_name"))
        income_account = _clean(mapped_row.get("income_account_name"))
        category = _clean(mapped_row.get("category_name")) or None

        if income > 0 and outcome > 0:
            if not outcome_account or not income_account:
                raise ImportRowError(
                    "transfer_accounts_missing", "Transfer accounts missing"
                )
            return NormalizedImportRow(
                transaction_type=TransactionType.TRANSFER,
                date=date,
                description=description,
                amount_sent=abs(outcome),
                amount_received=abs(income),
                from_account_name=outcome_account,
                from_account_currency=ensure_currency(
                    mapped_row.get("outcome_currency"), default_currency
                ),
                to_account_name=income_account,
                to_account_currency=ensure_currency(
                    mapped_row.get("income_currency"), default_currency
                ),
            )

        if outcome > 0:
            account = outcome_account or income_account
            if not account:
                raise ImportRowError(
                    "missing_account", "Account not provided for expense"
                )
            return NormalizedImportRow(
                transaction_type=TransactionType.EXPENSE,
                date=date,
                description=description,
                amount=abs(outcome),
                account_name=account,
                account_currency=ensure_currency(
                    mapped_row.get("outcome_currency")
                    or mapped_row.get("income_currency"),
                    default_currency,
                ),
                category_name=category,
            )

        if income > 0:
            account = income_account or outcome_account
            if not account:
                raise ImportRowError(
                    "missing_account", "Account not provided for income"
                )
            return NormalizedImportRow(
                transaction_type=TransactionType.INCOME,
                date=date,
                description=description,
                amount=abs(income),
                account_name=account,
                account_currency=ensure_currency(
                    mapped_row.get("income_currency")
                    or mapped_row.get("outcome_currency"),
                    default_currency,
                ),
                category_name=category,
            )

        return None


class MonefyProfile(ImportProfile):
    """
    Monefy exports one signed amount per row. Transfers appear as
    two rows whose category reads "To '<account>'" on the sending
    side and "From '<account>'" on the receiving side.
    """

    id = "monefy"
    label = "Monefy"
    description = "CSV exports from the Monefy app"
    options = ProfileOptions(
        delimiter=";", decimal_separator=".", thousands_separator=" "
    )
    field_variants = {
        "date": [],
        "outcome_account_name": ["account"],
        "category_name": ["category"],
        "amount": [],
        "outcome_currency": ["currency"],
        "converted_amount": ["convertedamount"],
        "converted_currency": ["convertedcurrency"],
        "comment": ["description"],
    }

    def _amount(self, value):
        return parse_amount(
            value,
            self.options.decimal_separator,
            self.options.thousands_separator,
        )

    def normalize_row(self, mapped_row, default_currency):
        date = parse_day_month_year(mapped_row.get("date"))

        amount = self._amount(mapped_row.get("amount"))
        if amount == 0:
            raise ImportRowError("invalid_amount", "Amount is required.")

        account = _clean(mapped_row.get("outcome_account_name"))
        if not account:
            raise ImportRowError("missing_account", "Account is required.")

        category = _clean(mapped_row.get("category_name"))
        description = _clean(mapped_row.get("comment"))
        currency = ensure_currency(mapped_row.get("outcome_currency"), default_currency)
        converted_amount = self._amount(mapped_row.get("converted_amount"))
        converted_currency = (
            ensure_currency(mapped_row.get("converted_currency"), default_currency)
            if _clean(mapped_row.get("converted_currency"))
            else None
        )

        for direction, pattern in (("out", _TRANSFER_TO), ("in", _TRANSFER_FROM)):
            match = pattern.match(category)
            if match:
                return TransferStub(
                    direction=direction,
                    date=date,
                    account=account,
                    other_account=match.group(1).strip(),
                    amount=amount,
                    currency=currency,
                    converted_amount=converted_amount,
                    converted_currency=converted_currency,
                    description=description,
                    raw_row=dict(mapped_row),
                )

        return NormalizedImportRow(
            transaction_type=(
                TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME
            ),
            date=date,
            description=description,
            amount=abs(amount),
            account_name=account,
            account_currency=currency,
            category_name=category or None,
        )


IMPORT_PROFILES: dict[str, ImportProfile] = {
    profile.id: profile for profile in (ZenMoneyProfile(), MonefyProfile())
}

DEFAULT_IMPORT_PROFILE_ID = ZenMoneyProfile.id


def get_import_profile(profile_id: str | None = None) -> ImportProfile:
    """Look up a profile by id; unknown or empty ids get the default."""
    if profile_id and profile_id in IMPORT_PROFILES:
        return IMPORT_PROFILES[profile_id]
    return IMPORT_PROFILES[DEFAULT_IMPORT_PROFILE_ID]
