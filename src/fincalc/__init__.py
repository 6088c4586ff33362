"""Financial calculators: loan amortization, income tax and income annualisation."""
