"""Calculation backend shared by the fincalc front-ends."""
