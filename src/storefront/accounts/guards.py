from functools import wraps

from ..logs import add_context
from .tokens import bearer_credential, resolve_credential


def customer_required(view):
    """
    Resolve the bearer credential before the view runs.

    The customer id lands on ``request.customer_id``. Must sit inside
    ``api_endpoint`` so that Unauthorized/Forbidden become 401/403 replies.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        credential = bearer_credential(request.headers.get("Authorization"))
        request.customer_id = resolve_credential(credential)
        add_context(customer_id=request.customer_id)
        return view(request, *args, **kwargs)

    return wrapper
