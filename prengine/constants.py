# prengine/constants.py

# --- Barbell and plates (lbs) ---
OLYMPIC_BAR_WEIGHT_LBS = 45.0
AVAILABLE_PLATES_LBS = (45.0, 35.0, 25.0, 15.0, 10.0, 5.0, 2.5)
MAX_PLATES_PER_SIDE = 15 # Physical limit for a loaded sleeve

# Differences below this are treated as an exact load
EXACT_LOAD_TOLERANCE_LBS = 0.1

# --- Units ---
KG_TO_LBS_FACTOR = 2.20462
UNIT_LBS = 'lbs'
UNIT_KG = 'kg'
SUPPORTED_UNITS = (UNIT_LBS, UNIT_KG)

# --- Percentage tables ---
# Common CrossFit training percentages, ten entries
COMMON_PERCENTAGES = (50, 60, 65, 70, 75, 80, 85, 90, 95, 100)

MAX_TABLE_PERCENTAGE = 150 # Overload prescriptions go above 100%
MAX_SINGLE_PERCENTAGE = 100

TRAINING_PERCENTAGES = {
    'strength': (85, 90, 95, 100),
    'power': (70, 75, 80, 85),
    'endurance': (50, 60, 65, 70),
}

# Checked from highest to lowest; lower bound inclusive
RECOMMENDED_REPS_BRACKETS = (
    (95, '1-2 reps'),
    (90, '2-3 reps'),
    (85, '3-4 reps'),
    (80, '4-5 reps'),
    (70, '6-8 reps'),
)
RECOMMENDED_REPS_FALLBACK = '12+ reps'

MAX_REASONABLE_ONE_RM_LBS = 1000.0

# --- Conversion table ---
CONVERSION_TABLE_MAX_PER_SIDE_LBS = 145
CONVERSION_TABLE_STEP_LBS = 5

DEFAULT_1RM_FORMULA = 'epley'
