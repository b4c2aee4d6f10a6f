"""Fixed catalogue of problem categories a branch can report."""

PROBLEM_TYPES = (
    "Air Conditioning",
    "Electrical",
    "Plumbing",
    "Heating",
    "Lighting",
    "Security System",
    "Internet/Network",
    "Furniture",
    "Cleaning",
    "Other",
)

MIN_RATING = 1
MAX_RATING = 5


def is_known_problem_type(problem_type: str) -> bool:
    return problem_type in PROBLEM_TYPES
