"""Lot label templates and print rendering."""

from plant_modules.labels.models import LabelTemplate, PrintJob

__all__ = ["LabelTemplate", "PrintJob"]
