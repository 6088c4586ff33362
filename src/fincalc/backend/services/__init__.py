"""Service-layer helpers for the fincalc backend."""

from .calculation_service import (
    calculate_annualisation,
    calculate_income_tax,
    calculate_loan,
    calculate_mortgage,
)

__all__ = [
    "calculate_annualisation",
    "calculate_income_tax",
    "calculate_loan",
    "calculate_mortgage",
]
