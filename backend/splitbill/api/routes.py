from __future__ import annotations

from typing import Any, Dict, List, Tuple

from flask import Blueprint, current_app, jsonify, request
from psycopg.errors import UniqueViolation

from splitbill.api.validators import (
    ApiValidationError,
    is_uuid,
    parse_activity_name,
    parse_additional_expenses,
    parse_expenses,
    parse_occurred_at,
    parse_participant_name,
    parse_participants,
    parse_payment_methods,
)
from splitbill.db.repository import SplitBillRepository
from splitbill.domain.models import (
    AdditionalExpense,
    Expense,
    ExpenseDiagnostic,
    Participant,
    SplitBillSummary,
)
from splitbill.domain.settlement import calculate
from splitbill.services.share_message import build_share_message

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


def _repo() -> SplitBillRepository:
    return SplitBillRepository(current_app.config.get("DATABASE_URL", ""))


def _owner_id() -> str:
    return current_app.config.get("RECORD_OWNER_ID", "mvp-owner")


def _db_unavailable():
    return _json_error("Database is not configured.", status=503, code="db_unavailable")


def _parse_bill_payload(
    data: Any,
) -> Tuple[List[Participant], List[Expense], List[AdditionalExpense]]:
    if not isinstance(data, dict):
        raise ApiValidationError("Request body must be a JSON object.")
    if "participants" not in data:
        raise ApiValidationError("Missing field: participants")
    if "expenses" not in data:
        raise ApiValidationError("Missing field: expenses")

    participants = parse_participants(data["participants"])
    expenses = parse_expenses(data["expenses"])
    additional_expenses = parse_additional_expenses(data.get("additional_expenses"))
    return participants, expenses, additional_expenses


def _calculate_logged(
    participants: List[Participant],
    expenses: List[Expense],
    additional_expenses: List[AdditionalExpense],
) -> Tuple[SplitBillSummary, List[ExpenseDiagnostic]]:
    diagnostics: List[ExpenseDiagnostic] = []
    summary = calculate(participants, expenses, additional_expenses, on_diagnostic=diagnostics.append)
    for d in diagnostics:
        current_app.logger.warning(
            "%s expense %s: %s %s", d.expense_type, d.expense_id, d.kind, ", ".join(d.unknown_ids)
        )
    return summary, diagnostics


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.post("/calculate")
def calculate_endpoint():
    """
    JSON body:
      - participants: [{id, name}]
      - expenses: [{id, description, amount, paid_by, participants}]
      - additional_expenses: same shape, optional
    Response: summary {total, per_participant, settlements} plus diagnostics
    """
    data = request.get_json(silent=True)
    if data is None:
        return _json_error("Request body must be JSON.", status=400)

    try:
        participants, expenses, additional_expenses = _parse_bill_payload(data)
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    summary, diagnostics = _calculate_logged(participants, expenses, additional_expenses)

    body: Dict[str, Any] = summary.to_dict()
    body["diagnostics"] = [d.to_dict() for d in diagnostics]
    return jsonify(body), 200


@api_bp.post("/share-message")
def share_message_endpoint():
    data = request.get_json(silent=True)
    if data is None:
        return _json_error("Request body must be JSON.", status=400)

    try:
        participants, expenses, additional_expenses = _parse_bill_payload(data)
        activity_name = parse_activity_name(data.get("activity_name"))
        payment_methods = parse_payment_methods(data.get("payment_methods"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    summary, _ = _calculate_logged(participants, expenses, additional_expenses)
    message = build_share_message(
        activity_name=activity_name,
        participants=participants,
        expenses=expenses,
        additional_expenses=additional_expenses,
        summary=summary,
        payment_methods=payment_methods,
        symbol=current_app.config.get("CURRENCY_SYMBOL", "Rp"),
    )
    return jsonify({"message": message}), 200


@api_bp.get("/participants")
def list_participants_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        rows = repo.list_participants(owner_id=_owner_id())
    except Exception:
        current_app.logger.exception("Failed to load participants")
        return _json_error("Failed to load participants.", status=500, code="db_error")

    return jsonify({"participants": [row.to_dict() for row in rows]}), 200


@api_bp.post("/participants")
def create_participant_endpoint():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _json_error("Request body must be a JSON object.", status=400)

    try:
        name = parse_participant_name(data.get("name"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    owner_id = _owner_id()
    try:
        if repo.find_participant_by_name(owner_id=owner_id, name=name) is not None:
            return _json_error(
                f"A participant named '{name}' already exists.",
                status=409,
                code="participant_exists",
            )
        row = repo.create_participant(owner_id=owner_id, name=name)
    except UniqueViolation:
        # lost a race with a concurrent insert of the same name
        return _json_error(
            f"A participant named '{name}' already exists.",
            status=409,
            code="participant_exists",
        )
    except Exception:
        current_app.logger.exception("Failed to create participant %r", name)
        return _json_error("Failed to create participant.", status=500, code="db_error")

    return jsonify(row.to_dict()), 201


@api_bp.delete("/participants/<participant_id>")
def delete_participant_endpoint(participant_id: str):
    if not is_uuid(participant_id):
        return _json_error("Participant id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        deleted = repo.delete_participant(owner_id=_owner_id(), participant_id=participant_id)
    except Exception:
        current_app.logger.exception("Failed to delete participant %s", participant_id)
        return _json_error("Failed to delete participant.", status=500, code="db_error")

    if not deleted:
        return _json_error("Participant not found.", status=404, code="not_found")
    return "", 204


@api_bp.post("/split-bills")
def create_split_bill_endpoint():
    """
    Same body as /calculate plus optional activity_name, occurred_at and
    payment_methods.
    The summary is recomputed here so the stored copy always matches the
    stored expenses.
    """
    data = request.get_json(silent=True)
    if data is None:
        return _json_error("Request body must be JSON.", status=400)

    try:
        participants, expenses, additional_expenses = _parse_bill_payload(data)
        activity_name = parse_activity_name(data.get("activity_name"))
        occurred_at = parse_occurred_at(data.get("occurred_at"))
        payment_methods = parse_payment_methods(data.get("payment_methods"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    if not participants or not (expenses or additional_expenses):
        return _json_error("A split bill needs participants and at least one expense.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    summary, _ = _calculate_logged(participants, expenses, additional_expenses)

    try:
        record = repo.create_split_bill(
            owner_id=_owner_id(),
            activity_name=activity_name,
            occurred_at=occurred_at,
            participants=participants,
            expenses=expenses,
            additional_expenses=additional_expenses,
            summary=summary,
            payment_methods=payment_methods,
        )
    except Exception:
        current_app.logger.exception("Failed to save split bill %r", activity_name)
        return _json_error("Failed to save split bill.", status=500, code="db_error")

    return jsonify({"record": record.to_dict()}), 201


@api_bp.get("/split-bills")
def list_split_bills_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        records = repo.list_split_bills(owner_id=_owner_id())
    except Exception:
        current_app.logger.exception("Failed to load split bills")
        return _json_error("Failed to load split bills.", status=500, code="db_error")

    return jsonify({"records": [r.to_dict() for r in records]}), 200


@api_bp.get("/split-bills/<record_id>")
def get_split_bill_endpoint(record_id: str):
    if not is_uuid(record_id):
        return _json_error("Record id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        record = repo.get_split_bill(owner_id=_owner_id(), record_id=record_id)
    except Exception:
        current_app.logger.exception("Failed to load split bill %s", record_id)
        return _json_error("Failed to load split bill.", status=500, code="db_error")

    if record is None:
        return _json_error("Split bill not found.", status=404, code="not_found")
    return jsonify({"record": record.to_dict()}), 200
