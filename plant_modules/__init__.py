"""
Plant operations modules.

Each sub-package owns one area of the plant (hr, labels, manufacturing,
packaging, purchasing, quality, templates, operations) and follows the same
shape:

* ``models.py``  -- frozen dataclass DTOs, zero I/O.
* ``orm.py``     -- SQLAlchemy models with ``to_dto()`` / ``from_dto()``.
* ``service.py`` -- the area's service facade; owns the transaction.

Business rules live in ``plant_engines``; services only load rows, call the
engine and persist the outcome.
"""
