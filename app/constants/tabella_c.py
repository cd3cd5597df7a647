"""
Costanti Tabella C - Dottori Commercialisti (D.M. 140/2012).

Aliquote espresse come frazione (0.03 = 3%).
Ogni scaglione: (da, a, aliquota_min, aliquota_max, etichetta_range, etichetta_aliquota).
a=None indica lo scaglione terminale illimitato.
"""

# ============== RIFERIMENTI NORMATIVI ==============

NORMATIVA_RIQUADRI = {
    "r1": "Art. 19 - Amministrazione e custodia di aziende | Tabella C, Riquadro 1 (Dottori Commercialisti)",
    "r2": "Art. 20 - Liquidazione di aziende | Tabella C, Riquadro 2 (Dottori Commercialisti)",
    "r3": "Art. 21 - Perizie, valutazioni e pareri motivati | Tabella C, Riquadro 3 (Dottori Commercialisti)",
    "r4": "Art. 22 - Revisioni contabili | Tabella C, Riquadro 4 (Dottori Commercialisti)",
    "r5_1": "Art. 23 comma 1 - Tenuta contabilità ordinaria | Tabella C, Riquadro 5.1 (Dottori Commercialisti)",
    "r5_2": "Art. 23 comma 2 - Contabilità semplificata | Tabella C, Riquadro 5.2 (Dottori Commercialisti)",
    "r7_1": "Art. 25 comma 1 - Costituzione e variazioni statuto | Tabella C, Riquadro 7.1 (Dottori Commercialisti)",
    "r7_2": "Art. 25 comma 2 - Fusioni, scissioni e operazioni straordinarie | Tabella C, Riquadro 7.2 (Dottori Commercialisti)",
    "r8_1": "Art. 26 comma 1 - Consulenza contrattuale | Tabella C, Riquadro 8.1 (Dottori Commercialisti)",
    "r9": "Art. 27 - Assistenza in procedure concorsuali | Tabella C, Riquadro 9 (Dottori Commercialisti)",
    "r10_1": "Art. 28 comma 1 - Assistenza tributaria (Dichiarazioni) | Tabella C, Riquadro 10.1 (Dottori Commercialisti)",
    "r10_2": "Art. 28 comma 2 - Rappresentanza tributaria | Tabella C, Riquadro 10.2 (Dottori Commercialisti)",
    "r10_3": "Art. 28 comma 3 - Consulenza tributaria | Tabella C, Riquadro 10.3 (Dottori Commercialisti)",
    "r11": "Art. 29 - Collegio Sindacale | Tabella C, Riquadro 11 (Dottori Commercialisti)",
}

# Riquadro 8.2: il comma dipende dal tipo di documento
NORMATIVA_R8_2_FINANZIAMENTI = "Art. 26 comma 2 - Consulenza su finanziamenti | Tabella C, Riquadro 8.2 (Dottori Commercialisti)"
NORMATIVA_R8_2_ECONOMICA = "Art. 26 comma 3 - Consulenza economica-finanziaria | Tabella C, Riquadro 8.2 (Dottori Commercialisti)"
NORMATIVA_R8_2_GENERICA = "Art. 26 - Consulenze (comma 2/3) | Tabella C, Riquadro 8.2 (Dottori Commercialisti)"

DOC_TYPES_FINANZIAMENTI = {"consulenza_finanziamenti", "consulente_finanziamento"}
DOC_TYPES_ECONOMICA = {"consulente_economico_finanziaria"}


# ============== SCAGLIONI PROPORZIONALI ==============

SCAGLIONI_R1 = [
    (0, 10_000, 0.03, 0.04, "Fino a 10.000 €", "3,00% - 4,00%"),
    (10_000, 50_000, 0.02, 0.03, "Da 10.000 a 50.000 €", "2,00% - 3,00%"),
    (50_000, None, 0.01, 0.02, "Oltre 50.000 €", "1,00% - 2,00%"),
]

# Liquidazione: attivo realizzato a scaglioni, passivo ad aliquota unica
SCAGLIONI_R2_ATTIVO = [
    (0, 400_000, 0.04, 0.06, "Fino a 400.000 €", "4,00% - 6,00%"),
    (400_000, 4_000_000, 0.02, 0.03, "Da 400.000 a 4.000.000 €", "2,00% - 3,00%"),
    (4_000_000, None, 0.0075, 0.01, "Oltre 4.000.000 €", "0,75% - 1,00%"),
]
ALIQUOTE_R2_PASSIVO = (0.0075, 0.01, "0,75% - 1,00%")

SCAGLIONI_R3 = [
    (0, 1_000_000, 0.008, 0.01, "Fino a 1.000.000 €", "0,80% - 1,00%"),
    (1_000_000, 3_000_000, 0.005, 0.007, "Da 1.000.000 a 3.000.000 €", "0,50% - 0,70%"),
    (3_000_000, None, 0.00025, 0.0005, "Oltre 3.000.000 €", "0,025% - 0,050%"),
]

SCAGLIONI_R5_2 = [
    (0, 50_000, 0.03, 0.04, "Fino a 50.000 €", "3,00% - 4,00%"),
    (50_000, 100_000, 0.01, 0.02, "Da 50.000 a 100.000 €", "1,00% - 2,00%"),
    (100_000, None, 0.005, 0.01, "Oltre 100.000 €", "0,50% - 1,00%"),
]

SCAGLIONI_R7_1 = [
    (0, 1_000_000, 0.0075, 0.015, "Fino a 1.000.000 €", "0,75% - 1,50%"),
    (1_000_000, 15_000_000, 0.005, 0.0075, "Da 1.000.000 a 15.000.000 €", "0,50% - 0,75%"),
    (15_000_000, None, 0.0025, 0.005, "Oltre 15.000.000 €", "0,25% - 0,50%"),
]

SCAGLIONI_R7_2 = [
    (0, 4_000_000, 0.01, 0.015, "Fino a 4.000.000 €", "1,00% - 1,50%"),
    (4_000_000, None, 0.005, 0.01, "Oltre 4.000.000 €", "0,50% - 1,00%"),
]

SCAGLIONI_R8_1 = [
    (0, 2_000_000, 0.0075, 0.02, "Fino a 2.000.000 €", "0,75% - 2,00%"),
    (2_000_000, None, 0.005, 0.0075, "Oltre 2.000.000 €", "0,50% - 0,75%"),
]

SCAGLIONI_R8_2 = [
    (0, 2_000_000, 0.0075, 0.01, "Fino a 2.000.000 €", "0,75% - 1,00%"),
    (2_000_000, None, 0.005, 0.0075, "Oltre 2.000.000 €", "0,50% - 0,75%"),
]

SCAGLIONI_R9 = [
    (0, 1_000_000, 0.01, 0.02, "Fino a 1.000.000 €", "1,00% - 2,00%"),
    (1_000_000, None, 0.007, 0.009, "Oltre 1.000.000 €", "0,70% - 0,90%"),
]


# ============== COMPONENTI (revisione, contabilità ordinaria) ==============
# (etichetta, campo input, aliquota_min, aliquota_max, etichetta_aliquota)

COMPONENTI_R4 = [
    ("A) Reddito", "valore", 0.001, 0.0015, "0,10% - 0,15%"),
    ("B) Attività", "valore2", 0.0005, 0.00075, "0,050% - 0,075%"),
    ("C) Passività", "valore3", 0.0005, 0.00075, "0,050% - 0,075%"),
]

COMPONENTI_R5_1 = [
    ("A) Reddito", "valore", 0.003, 0.005, "0,30% - 0,50%"),
    ("B) Attività", "valore2", 0.0002, 0.0006, "0,020% - 0,060%"),
    ("C) Passività", "valore3", 0.0002, 0.00065, "0,020% - 0,065%"),
]


# ============== RAPPRESENTANZA / CONSULENZA TRIBUTARIA ==============

ALIQUOTA_TRIBUTARIA_MIN = 0.01
ALIQUOTA_TRIBUTARIA_MAX = 0.05


# ============== DICHIARAZIONI (tariffe fisse) ==============

TARIFFE_DICHIARAZIONI = {
    "pf_no_piva": ("Redditi Persone Fisiche (no P.IVA)", 150),
    "pf_piva": ("Redditi Persone Fisiche con P.IVA", 450),
    "soc_persone": ("Redditi Società di Persone", 550),
    "soc_capitali": ("Redditi Società di Capitali", 650),
    "irap": ("Dichiarazione IRAP", 200),
    "iva": ("Dichiarazione IVA", 250),
    "sostituti": ("Sostituti d'Imposta", 150),
    "successione": ("Dichiarazione di Successione", 350),
    "altre": ("Altre comunicazioni/dichiarazioni", 100),
    "invio": ("Invio Telematico (per singola voce)", 20),
}


# ============== COLLEGIO SINDACALE ==============

SINDACI_BASE_FISSA = (6_000, 8_000)
SINDACI_SOGLIA_BASE = 5_000_000

SCAGLIONI_R11 = [
    (5_000_000, 100_000_000, 0.00009, 0.00010, "Da 5M a 100M", "0,009% - 0,010%"),
    (100_000_000, 300_000_000, 0.00006, 0.00009, "Da 100M a 300M", "0,006% - 0,009%"),
    (300_000_000, 800_000_000, 0.00005, 0.00006, "Da 300M a 800M", "0,005% - 0,006%"),
]

# Oltre 800M: scatti fissi ogni 100M
SINDACI_SCATTO_AMPIEZZA = 100_000_000
SINDACI_SCATTO_COMPENSO = (7_500, 10_000)
