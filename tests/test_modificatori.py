# -*- coding: utf-8 -*-
"""
Test modificatori e coefficienti (solo testo descrittivo).
"""
from app.services.tariffe import CalculationInput, compute_modifiers
from app.services.tariffe.modificatori import NESSUN_MODIFICATORE


def inp(**kwargs) -> CalculationInput:
    return CalculationInput.model_validate(kwargs)


class TestModificatori:
    """Regole per riquadro + regole comuni"""

    def test_never_empty(self):
        assert compute_modifiers("r1", inp()) == [NESSUN_MODIFICATORE]
        assert compute_modifiers("r99", inp()) == [NESSUN_MODIFICATORE]

    def test_r9_esito_negativo(self):
        assert compute_modifiers("r9", inp(esitoNegativo=True)) == ["Riduzione: esito negativo (-50%)."]
        assert compute_modifiers("r9", inp(esitoNegativo=False)) == [NESSUN_MODIFICATORE]

    def test_r10_1_always_fixed_fee_notice(self):
        mods = compute_modifiers("r10_1", inp())
        assert mods == ["Calcolo a tariffe fisse: somma delle voci selezionate."]

    def test_r10_3_custom_rate(self):
        mods = compute_modifiers("r10_3", inp(aliquota_consulenza="0,02"))
        assert mods == ["Aliquota personalizzata applicata (1% - 5%)."]

    def test_r8_2_intensity(self):
        mods = compute_modifiers("r8_2", inp(intensity_scaglione_2="min"))
        assert mods == ["Intensità per scaglione applicata (min/medio/max)."]

    def test_r11_role_reduction_and_percentage_in_order(self):
        """Regole specifiche prima, percentuale in coda"""
        mods = compute_modifiers("r11", inp(ruoloSindaco="presidente", riduzioneComma2=True, percentuale="12,5"))
        assert mods == [
            "Aumento: Presidente Collegio Sindacale (+50%).",
            "Riduzione: società di sola amministrazione/godimento o liquidazione (-50%).",
            "Percentuale (posizionamento nel range 0%=min, 100%=max): 12.5%.",
        ]

    def test_r11_sindaco_unico(self):
        assert compute_modifiers("r11", inp(ruoloSindaco="sindaco_unico")) == ["Aumento: Sindaco Unico (+100%)."]

    def test_r11_membro_no_modifier(self):
        assert compute_modifiers("r11", inp(ruoloSindaco="membro")) == [NESSUN_MODIFICATORE]

    def test_rules_do_not_leak_across_codes(self):
        """esitoNegativo vale solo per il riquadro 9"""
        assert compute_modifiers("r3", inp(esitoNegativo=True)) == [NESSUN_MODIFICATORE]
