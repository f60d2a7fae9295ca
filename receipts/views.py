from functools import wraps
import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from lib.ocr import parse_receipt_text
from lib.settlement import (
    FirstParticipantPays,
    ItemNotFoundError,
    ParticipantNotFoundError,
    SessionError,
    SplitSession,
    format_money,
)

from .decorators import rate_limit_edit, rate_limit_ocr
from .ocr_service import process_receipt_with_ocr
from .session_manager import SplitSessionManager
from .validators import FileUploadValidator, InputValidator

logger = logging.getLogger(__name__)

SETTLED_MESSAGE = "Everyone is settled!"


def _error(message, status=400):
    return JsonResponse({'error': message}, status=status)


def _validation_message(e: ValidationError) -> str:
    return "; ".join(e.messages)


def _json_body(request) -> dict:
    if not request.body:
        return {}
    data = json.loads(request.body)
    if not isinstance(data, dict):
        raise ValidationError("Expected a JSON object")
    return data


def split_session_view(view):
    """Load the visitor's SplitSession, run the view, save it back.

    Domain errors become JSON error responses; the session is only saved when
    the view succeeds.
    """
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        manager = SplitSessionManager(request)
        split_session = manager.load()
        try:
            response = view(request, split_session, *args, **kwargs)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error('Invalid JSON')
        except ValidationError as e:
            return _error(_validation_message(e))
        except (ItemNotFoundError, ParticipantNotFoundError) as e:
            return _error(str(e), status=404)
        except SessionError as e:
            return _error(str(e))
        manager.save(split_session)
        return response
    return wrapper


def session_payload(split_session) -> dict:
    receipt = split_session.receipt
    return {
        'participants': [p.model_dump() for p in split_session.participants],
        'receipt': receipt.to_dict() if receipt else None,
    }


def settlement_payload(split_session) -> dict:
    names = {p.id: p.name for p in split_session.participants}
    payer = FirstParticipantPays().select(split_session.participants)
    settlements = split_session.settle()
    return {
        'payer': payer.model_dump() if payer else None,
        'owed': {pid: format_money(amount) for pid, amount in split_session.owed().items()},
        'settlements': [
            dict(s.to_dict(),
                 from_name=names.get(s.from_participant),
                 to_name=names.get(s.to_participant))
            for s in settlements
        ],
        'settled': not settlements,
        'message': SETTLED_MESSAGE if not settlements else None,
    }


# ---------------------------------------------------------------------------
# Session and group
# ---------------------------------------------------------------------------

@require_http_methods(["GET"])
@split_session_view
def get_session(request, split_session):
    return JsonResponse(session_payload(split_session))


@csrf_exempt
@require_http_methods(["POST"])
def reset_session(request):
    SplitSessionManager(request).clear()
    return JsonResponse(session_payload(SplitSession()))


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def add_member(request, split_session):
    data = _json_body(request)
    name = InputValidator.validate_name(data.get('name'), "Name")
    participant = split_session.add_participant(name)
    return JsonResponse({'participant': participant.model_dump()}, status=201)


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def rename_member(request, split_session, participant_id):
    data = _json_body(request)
    name = InputValidator.validate_name(data.get('name'), "Name")
    participant = split_session.rename_participant(participant_id, name)
    return JsonResponse({'participant': participant.model_dump()})


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def remove_member(request, split_session, participant_id):
    split_session.remove_participant(participant_id)
    return JsonResponse(session_payload(split_session))


# ---------------------------------------------------------------------------
# Receipt capture
# ---------------------------------------------------------------------------

@csrf_exempt
@rate_limit_ocr
@require_http_methods(["POST"])
@split_session_view
def upload_receipt(request, split_session):
    """Run OCR on an uploaded image and make it the active receipt"""
    if len(split_session.participants) < settings.MIN_GROUP_SIZE:
        return _error(f'Please add at least {settings.MIN_GROUP_SIZE} group members')

    image_bytes = FileUploadValidator.validate_image_file(request.FILES.get('receipt_image'))
    result = process_receipt_with_ocr(image_bytes)
    split_session.load_ocr_result(result)
    return JsonResponse(session_payload(split_session), status=201)


@csrf_exempt
@rate_limit_ocr
@require_http_methods(["POST"])
def process_receipt(request):
    """Stateless OCR: base64 image in, parsed receipt draft out"""
    try:
        data = _json_body(request)
        image_bytes = FileUploadValidator.validate_base64_image(data.get('imageBase64'))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error('Invalid JSON')
    except ValidationError as e:
        return _error(_validation_message(e))

    result = process_receipt_with_ocr(image_bytes)
    return JsonResponse(result.to_dict())


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def parse_text(request, split_session):
    """Make a receipt draft from OCR text supplied by the client"""
    data = _json_body(request)
    text = data.get('text')
    if not isinstance(text, str):
        text = ""
    split_session.load_ocr_result(parse_receipt_text(text))
    return JsonResponse(session_payload(split_session), status=201)


# ---------------------------------------------------------------------------
# Receipt editing and assignment
# ---------------------------------------------------------------------------

@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def add_item(request, split_session):
    data = _json_body(request)
    item = split_session.add_item(
        InputValidator.clean_item_name(data.get('name', '')),
        data.get('price'),
    )
    return JsonResponse({'item': item.to_dict()}, status=201)


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def update_item(request, split_session, item_id):
    data = _json_body(request)
    name = data.get('name')
    item = split_session.update_item(
        item_id,
        name=InputValidator.clean_item_name(name) if name is not None else None,
        price=data.get('price'),
    )
    return JsonResponse({'item': item.to_dict()})


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def remove_item(request, split_session, item_id):
    split_session.remove_item(item_id)
    return JsonResponse(session_payload(split_session))


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def toggle_assignment(request, split_session, item_id):
    data = _json_body(request)
    assigned = split_session.toggle_assignment(item_id, str(data.get('participant_id', '')))
    item = split_session.get_item(item_id)
    return JsonResponse({'assigned': assigned, 'item': item.to_dict()})


@csrf_exempt
@rate_limit_edit
@require_http_methods(["POST"])
@split_session_view
def update_totals(request, split_session):
    data = _json_body(request)
    receipt = split_session.update_totals(
        data.get('subtotal'), data.get('tax'), data.get('tip')
    )
    return JsonResponse({'receipt': receipt.to_dict()})


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------

@require_http_methods(["GET"])
@split_session_view
def get_settlement(request, split_session):
    return JsonResponse(settlement_payload(split_session))
