# -*- coding: utf-8 -*-
"""
Test confronto corrispettivo pattuito / parametro ministeriale (Legge 49/2023).
"""
from app.services.tariffe import ComplianceStatus, compare_compliance


class TestConformita:
    """Scostamento, percentuale e stato"""

    def test_below_minimum(self):
        v = compare_compliance(1000, 800, 700)
        assert v.delta == -300
        assert v.percent_delta == -30.0
        assert v.status is ComplianceStatus.SOTTO_SOGLIA
        assert v.status_label == "SOTTO SOGLIA (-30.00%)"
        assert v.is_below_threshold

    def test_below_reference_but_above_minimum(self):
        """Il confronto è con il minimo, non con il valore scelto"""
        v = compare_compliance(1000, 800, 900)
        assert v.delta == -100
        assert v.status is ComplianceStatus.CONFORME
        assert v.status_label == "CONFORME (-10.00%)"

    def test_above_reference_without_plus_sign(self):
        """Scostamento positivo: percentuale senza segno +"""
        v = compare_compliance(1000, 800, 1200)
        assert v.status_label == "CONFORME (20.00%)"
        assert v.percent_suffix == " (20.00%)"

    def test_missing_agreed_fee_uses_reference(self):
        v = compare_compliance(1000, 800)
        assert v.agreed_fee == 1000
        assert v.delta == 0
        assert v.percent_suffix == ""
        assert v.status_label == "CONFORME"

    def test_italian_strings(self):
        v = compare_compliance("1.000,00", "800", "1.200,00")
        assert v.delta == 200
        assert v.percent_delta == 20.0

    def test_without_minimum_uses_delta(self):
        assert compare_compliance(1000, None, 900).status is ComplianceStatus.SOTTO_SOGLIA
        assert compare_compliance(1000, "", 1100).status is ComplianceStatus.CONFORME

    def test_zero_reference_no_percentage(self):
        v = compare_compliance(0, None, 100)
        assert v.delta == 100
        assert v.percent_delta is None
        assert v.status is ComplianceStatus.CONFORME

    def test_not_determinable(self):
        v = compare_compliance(None, None, None)
        assert v.status is ComplianceStatus.NON_DETERMINABILE
        assert v.status_label == "N/D"
        assert not v.is_below_threshold

    def test_agreed_fee_without_reference(self):
        """Pattuito senza riferimento né minimo: nessun delta, N/D"""
        v = compare_compliance("abc", None, 500)
        assert v.delta is None
        assert v.status is ComplianceStatus.NON_DETERMINABILE

    def test_agreed_fee_with_minimum_only(self):
        v = compare_compliance(None, 800, 500)
        assert v.delta is None
        assert v.status is ComplianceStatus.SOTTO_SOGLIA

    def test_percentage_rounded(self):
        v = compare_compliance(3, 1, 4)
        assert v.percent_delta == 33.33
