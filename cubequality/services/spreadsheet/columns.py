"""Column labels written by the exporter and the header aliases the importer accepts.

Aliases are lower-case and whitespace-trimmed; the first alias whose cell holds
a value wins.
"""

REPORTS_SHEET = "Reports"
DATA_ENTRY_SHEET = "Data Entry"
INSTRUCTIONS_SHEET = "Instructions"
REPORTS_FILENAME = "CubeQualityAnalysisReports.xlsx"
TEMPLATE_FILENAME = "ImportTemplate.xlsx"

LIST_DELIMITER = "; "
NOT_AVAILABLE = "N/A"
EMPTY_LIST = "None"
NO_SUMMARY = "No analysis available."

UNIQUE_REF_ALIASES = (
    "unique ref. no.",
    "unique reference no.",
    "ticket / docket no.",
    "ticket no.",
    "docket no.",
    "ref no",
    "id",
)

# Plain text fields: report attribute -> header aliases.
TEXT_FIELDS = {
    "client_name": ("client name",),
    "grade": ("grade",),
    "mix_code": ("mix code",),
    "ft_name": ("ft name", "ftname", "field technician", "technician name", "technician"),
    "opc": ("opc (kg)",),
    "flyash": ("flyash (kg)",),
    "ppc": ("ppc (kg)",),
    "seven_days_weight1": ("7-day weight 1",),
    "seven_days_weight2": ("7-day weight 2",),
    "seven_days_weight3": ("7-day weight 3",),
    "seven_days_load1": ("7-day load 1",),
    "seven_days_load2": ("7-day load 2",),
    "seven_days_load3": ("7-day load 3",),
    "twenty_eight_days_weight1": ("28-day weight 1",),
    "twenty_eight_days_weight2": ("28-day weight 2",),
    "twenty_eight_days_weight3": ("28-day weight 3",),
    "twenty_eight_days_load1": ("28-day load 1",),
    "twenty_eight_days_load2": ("28-day load 2",),
    "twenty_eight_days_load3": ("28-day load 3",),
    "observations": ("observations",),
}

SITE_OR_PLANT_ALIASES = ("site / plant", "site/plant", "site or plant")
MIX_TYPE_ALIASES = ("mix type",)
CUBE_SIZE_ALIASES = ("cube size (mm)", "cube size")
CASTING_DATE_ALIASES = ("date of casting", "casting date")
GENERATED_AT_ALIASES = ("generated at",)
HASH_ALIASES = ("verification hash",)

QUALITY_SCORE_ALIASES = ("overall quality score",)
SUMMARY_ALIASES = ("summary",)
SEVEN_DAY_AVERAGE_ALIASES = ("7-day avg strength (n/mm²)", "7-day avg strength (n/mm2)", "7-day avg strength")
SEVEN_DAY_STATUS_ALIASES = ("7-day status",)
TWENTY_EIGHT_DAY_AVERAGE_ALIASES = ("28-day avg strength (n/mm²)", "28-day avg strength (n/mm2)", "28-day avg strength")
TWENTY_EIGHT_DAY_STATUS_ALIASES = ("28-day status",)
ISSUES_ALIASES = ("issues",)
RECOMMENDATIONS_ALIASES = ("recommendations",)

# Input columns: (header, report attribute). Shared by the export and the template.
INPUT_COLUMNS = [
    ("Unique Ref. No.", "unique_ref_no"),
    ("Client Name", "client_name"),
    ("Site / Plant", "site_or_plant"),
    ("Date of Casting", "date_of_casting"),
    ("Grade", "grade"),
    ("Mix Code", "mix_code"),
    ("FT Name", "ft_name"),
    ("Mix Type", "mix_type"),
    ("Cube Size (mm)", "cube_size"),
    ("OPC (kg)", "opc"),
    ("Flyash (kg)", "flyash"),
    ("PPC (kg)", "ppc"),
    ("7-Day Weight 1", "seven_days_weight1"),
    ("7-Day Weight 2", "seven_days_weight2"),
    ("7-Day Weight 3", "seven_days_weight3"),
    ("7-Day Load 1", "seven_days_load1"),
    ("7-Day Load 2", "seven_days_load2"),
    ("7-Day Load 3", "seven_days_load3"),
    ("28-Day Weight 1", "twenty_eight_days_weight1"),
    ("28-Day Weight 2", "twenty_eight_days_weight2"),
    ("28-Day Weight 3", "twenty_eight_days_weight3"),
    ("28-Day Load 1", "twenty_eight_days_load1"),
    ("28-Day Load 2", "twenty_eight_days_load2"),
    ("28-Day Load 3", "twenty_eight_days_load3"),
    ("Observations", "observations"),
]

ANALYSIS_HEADERS = [
    "Overall Quality Score",
    "7-Day Avg Strength (N/mm²)",
    "7-Day Status",
    "28-Day Avg Strength (N/mm²)",
    "28-Day Status",
    "Summary",
    "Issues",
    "Recommendations",
    "Generated At",
    "Verification Hash",
]

INSTRUCTIONS = [
    ("Column Header", "Description", "Example"),
    ("Unique Ref. No. (or Ticket No., ID, etc.)", "Required. The unique identifier for the report.", "2024-08-01-1"),
    ("Client Name", "Required. Name of the client.", "Future Homes LLC"),
    ("Site / Plant", 'Required. Choose either "Site" or "Plant".', "Site"),
    ("Date of Casting", "Required. The date the concrete was cast in YYYY-MM-DD format.", "2024-07-28"),
    ("Grade", "Required. The grade of the concrete mix.", "M30"),
    ("Mix Code", "Required. The specific code for the mix.", "MIX-B-45"),
    ("FT Name", "Optional. Name of the Field Technician.", "Jane Smith"),
    ("Mix Type", 'Optional. "Standard" or "Customer". Defaults to Standard.', "Customer"),
    ("Cube Size (mm)", 'Optional. "100" or "150". Defaults to 150.', "150"),
    ("OPC (kg)", "Optional. Amount of OPC in kilograms.", "380"),
    ("Flyash (kg)", "Optional. Amount of Flyash in kilograms.", "120"),
    ("PPC (kg)", "Optional. Amount of PPC in kilograms.", "0"),
    ("7-Day Weight 1/2/3", "Optional. Weight of the cube in kg for the 7-day test.", "8.21"),
    ("7-Day Load 1/2/3", "Optional. Load applied in kN for the 7-day test.", "450"),
    ("28-Day Weight 1/2/3", "Optional. Weight of the cube in kg for the 28-day test.", "8.25"),
    ("28-Day Load 1/2/3", "Optional. Load applied in kN for the 28-day test.", "680"),
    ("Observations", "Optional. Any additional notes or observations.", "No issues observed during casting."),
    ("---", "---", "---"),
    (
        "NOTE:",
        "Target test dates are always recalculated from the Date of Casting. "
        "AI analysis columns (Score, Status, Summary, etc.) are only read back from a full export.",
        "They are populated by the system upon analysis.",
    ),
]

TEMPLATE_EXAMPLE = {
    "Unique Ref. No.": "2024-08-01-1",
    "Client Name": "Future Homes LLC",
    "Site / Plant": "Site",
    "Date of Casting": "2024-07-28",
    "Grade": "M30",
    "Mix Code": "MIX-B-45",
    "FT Name": "Jane Smith",
    "Mix Type": "Customer",
    "Cube Size (mm)": 150,
    "OPC (kg)": 380,
    "Flyash (kg)": 120,
    "PPC (kg)": 0,
    "7-Day Weight 1": 8.21,
    "7-Day Weight 2": 8.22,
    "7-Day Weight 3": 8.19,
    "7-Day Load 1": 450,
    "7-Day Load 2": 465,
    "7-Day Load 3": 455,
    "28-Day Weight 1": 8.25,
    "28-Day Weight 2": 8.24,
    "28-Day Weight 3": 8.27,
    "28-Day Load 1": 680,
    "28-Day Load 2": 690,
    "28-Day Load 3": 675,
    "Observations": "Casting was performed under normal conditions.",
}

KNOWN_HEADERS = frozenset(
    alias
    for aliases in (
        UNIQUE_REF_ALIASES,
        *TEXT_FIELDS.values(),
        SITE_OR_PLANT_ALIASES,
        MIX_TYPE_ALIASES,
        CUBE_SIZE_ALIASES,
        CASTING_DATE_ALIASES,
        GENERATED_AT_ALIASES,
        HASH_ALIASES,
        QUALITY_SCORE_ALIASES,
    )
    for alias in aliases
)
