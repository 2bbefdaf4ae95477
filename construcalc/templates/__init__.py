"""Template catalogue — built-in templates, search, and persistence."""

from construcalc.templates.library import TemplateLibrary
from construcalc.templates.seed_data import SEED_TEMPLATES

__all__ = ["SEED_TEMPLATES", "TemplateLibrary"]
