from __future__ import annotations

import structlog
from django.contrib.auth.hashers import check_password, make_password
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..exceptions import Conflict, Unauthorized
from .models import Customer
from .tokens import issue_token

log = structlog.get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register(*, email: str, password: str, first_name: str, last_name: str, phone: str = "") -> tuple[Customer, str]:
    """
    Create a customer account and issue its first token.

    Raises Conflict when the email is already registered, including when a
    concurrent registration for the same email wins the insert.
    """
    email = normalize_email(email)
    if Customer.objects.filter(email=email).exists():
        raise Conflict("Email already registered")

    try:
        with transaction.atomic():
            customer = Customer.objects.create(
                email=email,
                password_hash=make_password(password),
                first_name=first_name,
                last_name=last_name,
                phone=phone or "",
            )
    except IntegrityError as e:
        raise Conflict("Email already registered") from e

    log.info("customer.registered", customer_id=customer.pk)
    return customer, issue_token(customer)


def login(*, email: str, password: str) -> tuple[Customer, str]:
    customer = Customer.objects.filter(email=normalize_email(email), is_active=True).first()

    if customer is None:
        # Hash anyway so unknown emails take as long as wrong passwords.
        make_password(password)
        raise Unauthorized("Invalid email or password")

    if not check_password(password, customer.password_hash):
        log.info("customer.login_failed", customer_id=customer.pk)
        raise Unauthorized("Invalid email or password")

    customer.last_login = timezone.now()
    customer.save(update_fields=["last_login"])
    return customer, issue_token(customer)


def customer_to_dict(customer: Customer) -> dict:
    return {
        "id": customer.pk,
        "email": customer.email,
        "firstName": customer.first_name,
        "lastName": customer.last_name,
    }
