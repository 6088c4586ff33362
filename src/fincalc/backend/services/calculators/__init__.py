"""Domain-specific calculation helpers."""

from .amortization import compute_payment, generate_schedule, summarise_schedule
from .annualisation import build_annualisation_breakdown, compute_annualisation
from .income_tax import compose_tax_result, get_frequency_amount
from .utils import format_percentage, round_currency, round_rate

__all__ = [
    "build_annualisation_breakdown",
    "compose_tax_result",
    "compute_annualisation",
    "compute_payment",
    "format_percentage",
    "generate_schedule",
    "get_frequency_amount",
    "round_currency",
    "round_rate",
    "summarise_schedule",
]
