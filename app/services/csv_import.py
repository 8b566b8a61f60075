# app/services/csv_import.py
"""
Bulk application import from CSV.

Stages run strictly in order: parse, per-row transform and validate,
partition, duplicate emails within the upload, clash with existing
applications, then batched insert with a per-row fallback.
"""
import csv
import io
import logging
import re
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import List, Dict, Any, Tuple, Optional, Union

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.application import Application
from app.schemas.csv_import import ParsedApplication, RowError, ImportResult, ImportPreview
from app.utils.validators import ApplicationValidator, ACADEMIC_LEVELS

logger = logging.getLogger(__name__)

# CSV header -> applications column
CSV_FIELD_MAPPINGS: "OrderedDict[str, str]" = OrderedDict([
    ("scholarship_id", "scholarship_id"),
    # Personal Information
    ("first_name", "first_name"),
    ("last_name", "last_name"),
    ("email", "email"),
    ("phone", "phone"),
    ("address", "address"),
    ("city", "city"),
    ("state", "state"),
    ("zip", "zip"),
    ("date_of_birth", "date_of_birth"),
    # Academic Information
    ("school", "school"),
    ("graduation_year", "graduation_year"),
    ("gpa", "gpa"),
    ("major", "major"),
    ("academic_level", "academic_level"),
    # Essay Responses
    ("career_goals", "career_goals"),
    ("financial_need", "financial_need"),
    ("community_involvement", "community_involvement"),
    ("why_deserve_scholarship", "why_deserve_scholarship"),
    # Additional Information
    ("work_experience", "work_experience"),
    ("extracurricular_activities", "extracurricular_activities"),
    ("awards_and_honors", "awards_and_honors"),
])

REQUIRED_FIELDS = ["scholarship_id", "first_name", "last_name", "email", "school", "major"]

TEMPLATE_SAMPLE_ROW = {
    "scholarship_id": "your-scholarship-id-here",
    "first_name": "John",
    "last_name": "Doe",
    "email": "john.doe@example.com",
    "phone": "+1-555-123-4567",
    "address": "123 Main St",
    "city": "Portland",
    "state": "OR",
    "zip": "97201",
    "school": "Oregon State University",
    "graduation_year": str(date.today().year + 1),
    "gpa": "3.5",
    "major": "Forestry",
    "academic_level": "undergraduate",
    "career_goals": "I want to work in sustainable forestry management...",
    "financial_need": "I need financial assistance to complete my education...",
    "community_involvement": "I volunteer with local environmental groups...",
}

_WHITESPACE = re.compile(r"\s+")


class CSVParseError(Exception):
    """The upload could not be read as CSV; nothing was validated or written."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def normalize_header(header: str) -> str:
    return _WHITESPACE.sub("_", (header or "").strip().lower())


# ---------------------------------------------------------------------------
# Stage 1: parse
# ---------------------------------------------------------------------------

def parse_csv(content: Union[bytes, str]) -> List[Dict[str, str]]:
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVParseError([f"Failed to parse CSV: file is not valid UTF-8 ({e.reason})"])

    reader = csv.reader(io.StringIO(content))
    errors: List[str] = []
    rows: List[Dict[str, str]] = []
    headers: Optional[List[str]] = None

    try:
        for record in reader:
            if not record or all(cell.strip() == "" for cell in record):
                continue
            if headers is None:
                headers = [normalize_header(h) for h in record]
                continue
            if len(record) != len(headers):
                errors.append(
                    f"Row {reader.line_num}: expected {len(headers)} fields but found {len(record)}"
                )
                continue
            rows.append(dict(zip(headers, record)))
    except csv.Error as e:
        errors.append(f"Failed to parse CSV: line {reader.line_num}: {e}")

    if headers is None:
        errors.append("CSV file is empty or contains no valid data")
    if errors:
        raise CSVParseError(errors)
    if not rows:
        raise CSVParseError(["CSV file is empty or contains no valid data"])
    return rows


# ---------------------------------------------------------------------------
# Stage 2: transform + validate each row
# ---------------------------------------------------------------------------

def validate_and_transform_row(row: Dict[str, str], row_number: int, today: Optional[date] = None) -> ParsedApplication:
    errors: List[str] = []
    data: Dict[str, Any] = {}

    for field in REQUIRED_FIELDS:
        if not (row.get(field) or "").strip():
            errors.append(f"Missing required field: {field}")

    for csv_field, column in CSV_FIELD_MAPPINGS.items():
        value = (row.get(csv_field) or "").strip()
        if not value:
            continue

        if column == "email":
            if not ApplicationValidator.is_valid_email(value):
                errors.append(f"Invalid email format: {value}")
            else:
                data[column] = value
        elif column == "phone":
            if not ApplicationValidator.is_valid_phone(value):
                errors.append(f"Invalid phone format: {value}")
            else:
                data[column] = value
        elif column == "graduation_year":
            ok, year = ApplicationValidator.validate_graduation_year(value, today)
            if not ok:
                errors.append(f"Invalid graduation year: {value}")
            else:
                data[column] = year
        elif column == "gpa":
            ok, gpa = ApplicationValidator.validate_gpa(value)
            if not ok:
                errors.append(f"Invalid GPA: {value} (must be between 0.0 and 4.0)")
            else:
                data[column] = gpa
        elif column == "academic_level":
            if not ApplicationValidator.is_valid_academic_level(value):
                errors.append(
                    f"Invalid academic level: {value} (must be one of: {', '.join(ACADEMIC_LEVELS)})"
                )
            else:
                data[column] = value
        else:
            data[column] = value

    data.setdefault("academic_level", "undergraduate")
    data.setdefault("status", "submitted")

    return ParsedApplication(row_number=row_number, data=data, errors=errors)


def transform_rows(rows: List[Dict[str, str]], today: Optional[date] = None) -> List[ParsedApplication]:
    # Row 1 is the header
    return [validate_and_transform_row(row, index + 2, today) for index, row in enumerate(rows)]


# ---------------------------------------------------------------------------
# Stage 3: partition
# ---------------------------------------------------------------------------

def partition_applications(parsed: List[ParsedApplication]) -> Tuple[List[ParsedApplication], List[ParsedApplication], List[RowError]]:
    valid, invalid, errors = [], [], []
    for app in parsed:
        if app.is_valid:
            valid.append(app)
        else:
            invalid.append(app)
            for message in app.errors:
                errors.append(RowError(row=app.row_number, message=message, data=app.data))
    return valid, invalid, errors


# ---------------------------------------------------------------------------
# Stage 4 and 5: duplicates
# ---------------------------------------------------------------------------

def check_duplicate_emails(applications: List[ParsedApplication]) -> List[RowError]:
    rows_by_email: "OrderedDict[str, List[int]]" = OrderedDict()
    for app in applications:
        if app.email:
            rows_by_email.setdefault(app.email, []).append(app.row_number)

    errors = []
    for email, rows in rows_by_email.items():
        if len(rows) < 2:
            continue
        for row in rows:
            others = ", ".join(str(r) for r in rows if r != row)
            errors.append(RowError(
                row=row,
                message=f"Duplicate email in batch: {email} (also found in rows: {others})",
            ))
    return errors


def check_existing_applications(db: Session, applications: List[ParsedApplication]) -> List[RowError]:
    """One query over all emails and scholarship ids in the upload."""
    emails = sorted({app.email for app in applications if app.email})
    scholarship_ids = sorted({app.scholarship_id for app in applications if app.scholarship_id})
    if not emails or not scholarship_ids:
        return []

    try:
        existing = db.query(Application.email, Application.scholarship_id).filter(
            Application.email.in_(emails),
            Application.scholarship_id.in_(scholarship_ids),
        ).all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error checking existing applications: {e}")
        return []

    existing_pairs = {(email, scholarship_id) for email, scholarship_id in existing}
    errors = []
    for app in applications:
        if (app.email, app.scholarship_id) in existing_pairs:
            errors.append(RowError(
                row=app.row_number,
                message=f"Application already exists for email {app.email} and this scholarship",
            ))
    return errors


# ---------------------------------------------------------------------------
# Stage 6: commit
# ---------------------------------------------------------------------------

class ApplicationImporter:
    def __init__(self, db: Session, batch_size: Optional[int] = None):
        self.db = db
        self.batch_size = batch_size or settings.CSV_IMPORT_BATCH_SIZE

    @staticmethod
    def clean(app: ParsedApplication, submitted_at: datetime) -> Dict[str, Any]:
        # Same key set on every row so a batch is one executemany
        row = {column: None for column in CSV_FIELD_MAPPINGS.values()}
        row.update(app.data)
        row["status"] = "submitted"
        row["submission_date"] = submitted_at
        return row

    def _insert_batch(self, rows: List[Dict[str, Any]]) -> None:
        self.db.execute(insert(Application), rows)
        self.db.commit()

    def _insert_one(self, row: Dict[str, Any]) -> None:
        self.db.execute(insert(Application), [row])
        self.db.commit()

    def import_applications(self, applications: List[ParsedApplication]) -> ImportResult:
        success_count = 0
        error_count = 0
        errors: List[RowError] = []
        submitted_at = datetime.now(timezone.utc)

        try:
            cleaned = [self.clean(app, submitted_at) for app in applications]
            for start in range(0, len(cleaned), self.batch_size):
                batch = cleaned[start:start + self.batch_size]
                originals = applications[start:start + self.batch_size]
                try:
                    self._insert_batch(batch)
                    success_count += len(batch)
                    logger.info(f"📥 Imported batch of {len(batch)} applications")
                    continue
                except SQLAlchemyError as e:
                    self.db.rollback()
                    logger.warning(f"Batch insert of {len(batch)} rows failed, retrying row by row: {e}")

                for row, original in zip(batch, originals):
                    try:
                        self._insert_one(row)
                        success_count += 1
                    except SQLAlchemyError as e:
                        self.db.rollback()
                        message = str(getattr(e, "orig", None) or e)
                        logger.error(f"❌ Row {original.row_number} failed to import: {message}")
                        errors.append(RowError(
                            row=original.row_number,
                            message=f"Database error: {message}",
                            data=original.data,
                        ))
                        error_count += 1
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Import failed: {e}")
            errors.append(RowError(row=0, message=f"Import failed: {e}"))
            error_count = len(applications)

        return ImportResult(
            success=success_count > 0,
            processed_count=len(applications),
            success_count=success_count,
            error_count=error_count,
            errors=errors,
        )


# ---------------------------------------------------------------------------
# Whole pipeline
# ---------------------------------------------------------------------------

def _screen(db: Session, content: Union[bytes, str], today: Optional[date] = None):
    rows = parse_csv(content)
    parsed = transform_rows(rows, today)
    valid, invalid, errors = partition_applications(parsed)
    clash_errors = check_duplicate_emails(valid) + check_existing_applications(db, valid)
    return parsed, valid, invalid, errors + clash_errors


def preview_import(db: Session, content: Union[bytes, str], today: Optional[date] = None) -> ImportPreview:
    """Everything except the write, so the admin can fix and re-upload first."""
    parsed, valid, invalid, errors = _screen(db, content, today)
    return ImportPreview(total_rows=len(parsed), valid=valid, invalid=invalid, errors=errors)


def run_import(db: Session, content: Union[bytes, str], batch_size: Optional[int] = None,
               today: Optional[date] = None) -> ImportResult:
    parsed, valid, invalid, errors = _screen(db, content, today)
    flagged_rows = {error.row for error in errors}
    clean = [app for app in valid if app.row_number not in flagged_rows]

    if not clean:
        logger.warning(f"CSV import: none of {len(parsed)} row(s) passed screening")
        return ImportResult(
            success=False,
            processed_count=len(parsed),
            success_count=0,
            error_count=len(flagged_rows),
            errors=errors,
        )

    result = ApplicationImporter(db, batch_size).import_applications(clean)
    result.processed_count = len(parsed)
    result.error_count += len(flagged_rows)
    result.errors = errors + result.errors
    logger.info(
        f"CSV import finished: {result.success_count} imported, {result.error_count} failed, "
        f"{len(parsed)} rows read"
    )
    return result


def generate_csv_template() -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    headers = list(CSV_FIELD_MAPPINGS.keys())
    writer.writerow(headers)
    writer.writerow([TEMPLATE_SAMPLE_ROW.get(header, "") for header in headers])
    return output.getvalue()
