"""
Common utility functions for Lambda handlers.
"""
import json
from decimal import Decimal
from typing import Any, Dict

from .errors import ValidationError

# DynamoDB numbers hold at most 38 significant digits
DYNAMODB_MAX_DIGITS = 38


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types from DynamoDB."""

    def default(self, o):
        if isinstance(o, Decimal):
            # Convert to int if it's a whole number, otherwise float
            if o % 1 == 0:
                return int(o)
            return float(o)
        return super().default(o)


def format_response(
    status_code: int,
    body: Any,
    headers: Dict[str, str] = None
) -> Dict[str, Any]:
    """
    Format a standard API Gateway response with CORS headers.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)
        headers: Additional headers to include

    Returns:
        API Gateway response dict
    """
    default_headers = {
        'Access-Control-Allow-Origin': '*',
        'Access-Control-Allow-Credentials': True,
        'Access-Control-Allow-Headers': 'Content-Type,Authorization',
        'Content-Type': 'application/json'
    }

    if headers:
        default_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': default_headers,
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def parse_body(event: dict) -> dict:
    """
    Parse JSON body from API Gateway event.

    Args:
        event: API Gateway Lambda proxy event

    Returns:
        Parsed body dict, empty dict when there is no body

    Raises:
        ValidationError if the body is not a JSON object
    """
    body = event.get('body')
    if body is None or body == '':
        return {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            raise ValidationError('Invalid JSON')
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object')
    return body


def get_path_param(event: dict, param_name: str) -> str:
    """Extract path parameter from event."""
    try:
        return event['pathParameters'][param_name]
    except (KeyError, TypeError):
        return None


def get_query_param(event: dict, param_name: str, default: str = None) -> str:
    """Extract query string parameter from event."""
    params = event.get('queryStringParameters') or {}
    return params.get(param_name, default)


def require_field(body: dict, field: str, message: str = None) -> Any:
    """Return a required body field or raise ValidationError."""
    value = body.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(message or f"Missing {field}", field=field)
    return value


def parse_non_negative_int(value: Any, field: str) -> int:
    """Parse an integer amount (points, cost) that may not be negative."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a non-negative integer", field=field)
    try:
        number = Decimal(str(value).strip())
        valid = (
            number.is_finite()
            and number == number.to_integral_value()
            and number >= 0
            and number.adjusted() < DYNAMODB_MAX_DIGITS
        )
    except ArithmeticError:
        raise ValidationError(f"{field} must be a non-negative integer", field=field)
    if not valid:
        raise ValidationError(f"{field} must be a non-negative integer", field=field)
    return int(number)
