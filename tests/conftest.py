import pytest

PAY_WHEN_PAID_TEXT = (
    "Subcontractor payment shall be made pay-when-paid, within seven days of "
    "receiving payment from Owner."
)

TERMINATION_AND_NOTICE_TEXT = (
    "The Owner may terminate for convenience at any time. "
    "The Subcontractor must provide written notice of any claim within 24 hours."
)

BALANCED_TEXT = (
    "Payment is due within thirty (30) days of receipt of a valid invoice. "
    "Either party may terminate this Agreement for cause upon thirty days written notice. "
    "Each party's total liability under this Agreement is capped at the total contract value."
)


@pytest.fixture()
def pay_when_paid_text() -> str:
    """Single HIGH payment-terms clause."""
    return PAY_WHEN_PAID_TEXT


@pytest.fixture()
def termination_and_notice_text() -> str:
    """One termination-for-convenience clause and one short notice clause."""
    return TERMINATION_AND_NOTICE_TEXT


@pytest.fixture()
def balanced_text() -> str:
    """Standard terms with no risk-bearing phrasing."""
    return BALANCED_TEXT
