"""
Shape Normalizer
Coerces heterogeneous LLM output into the fixed shapes the persistence layer
stores. Every rule is total (never raises) and idempotent.

Only whole-value substitution is performed: a record that is already a
mapping is not field-filled, and a present roadmap is not repaired per field.
"""
import copy
from typing import Any, Callable, Dict, List, Optional

Rule = Callable[[Any], Any]

CAREER_PATH_DEFAULTS = {
    "requirements": [],
    "growthPotential": "High",
    "salaryRange": "Competitive",
    "companies": [],
}

ROADMAP_SEQUENCE_FIELDS = ("immediate", "shortTerm", "longTerm")
ROADMAP_RESOURCE_FIELDS = ("courses", "projects", "certifications", "networking")


# ========== Rules ==========

def sequence_of(element_rule: Optional[Rule] = None) -> Rule:
    """Lists are kept (element rule applied when declared); anything else becomes []"""
    def rule(value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        if element_rule is None:
            return list(value)
        return [element_rule(item) for item in value]
    return rule


def career_path_entry(value: Any) -> Any:
    """A bare title string is wrapped into a full career path record"""
    if isinstance(value, str):
        entry = {"title": value, "description": f"Career path: {value}"}
        entry.update(copy.deepcopy(CAREER_PATH_DEFAULTS))
        return entry
    return value


def default_learning_roadmap() -> Dict[str, Any]:
    roadmap: Dict[str, Any] = {field: [] for field in ROADMAP_SEQUENCE_FIELDS}
    roadmap["resources"] = {field: [] for field in ROADMAP_RESOURCE_FIELDS}
    return roadmap


def learning_roadmap(value: Any) -> Any:
    """Absent roadmap becomes the empty skeleton; a present one is used as-is"""
    if value is None:
        return default_learning_roadmap()
    return value


def action_plan(value: Any) -> Any:
    """Guidance action plan: absent becomes empty immediate/shortTerm/longTerm lists"""
    if value is None:
        return {field: [] for field in ROADMAP_SEQUENCE_FIELDS}
    return value


def conversation_log(value: Any) -> List[Any]:
    """Wrong top-level shape drops the data"""
    if isinstance(value, list):
        return list(value)
    return []


SHAPES: Dict[str, Rule] = {
    "sequence": sequence_of(),
    "career path entry": career_path_entry,
    "sequence of career path entries": sequence_of(career_path_entry),
    "learning roadmap": learning_roadmap,
    "action plan": action_plan,
    "conversation log": conversation_log,
    "sequence of conversation turns": conversation_log,
}


def normalize(value: Any, shape: str) -> Any:
    """
    Normalize a value against a named shape.

    Unknown "sequence of ..." shapes fall back to a plain sequence rule;
    any other unknown shape returns the value untouched.
    """
    rule = SHAPES.get(shape)
    if rule is None:
        if shape.startswith("sequence of "):
            rule = SHAPES["sequence"]
        else:
            return value
    return rule(value)


# ========== Entity-level normalizers ==========

def _apply(document: Dict[str, Any], rules: Dict[str, Rule]) -> List[str]:
    """Apply rules to document fields in place; returns the fields that changed"""
    repaired = []
    for field, rule in rules.items():
        before = document.get(field)
        after = rule(before)
        if after != before:
            repaired.append(field)
        document[field] = after
    return repaired


GUIDANCE_RULES: Dict[str, Rule] = {
    "careerPaths": sequence_of(career_path_entry),
    "skillGaps": sequence_of(),
    "skillRecommendations": sequence_of(),
    "actionPlan": action_plan,
}

DISCOVERY_RULES: Dict[str, Rule] = {
    "careerPaths": sequence_of(career_path_entry),
    "learningRoadmap": learning_roadmap,
    "conversation": conversation_log,
}


def normalize_guidance(guidance: Any) -> Dict[str, Any]:
    """Career guidance document: {careerPaths, skillGaps, learningRoadmap, skillRecommendations, actionPlan}"""
    document = dict(guidance) if isinstance(guidance, dict) else {}
    _apply(document, GUIDANCE_RULES)
    return document


def normalize_discovery(discovery: Any) -> Dict[str, Any]:
    """Career discovery document: {careerPaths, learningRoadmap, conversation}"""
    document = dict(discovery) if isinstance(discovery, dict) else {}
    _apply(document, DISCOVERY_RULES)
    return document


def repaired_fields(document: Any, rules: Dict[str, Rule]) -> List[str]:
    """Names of fields the rules would change, without modifying the document"""
    if not isinstance(document, dict):
        return list(rules)
    return _apply(dict(document), rules)
