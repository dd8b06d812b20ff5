"""
Module ORM Registry (``plant_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.

Architecture position
---------------------
**Modules layer** -- utility.  Called by ``plant_kernel.db.engine.create_tables``
through a local import; MUST NOT be imported at module level by the kernel.
"""


def import_all_orm_models() -> None:
    """Import every ``plant_modules.*.orm`` module to register ORM models.

    Idempotent -- repeated calls are harmless.  Purchasing and manufacturing
    go first because other areas hold foreign keys to their tables.
    """
    # fmt: off
    import plant_modules.purchasing.orm  # noqa: F401
    import plant_modules.manufacturing.orm  # noqa: F401
    import plant_modules.hr.orm  # noqa: F401
    import plant_modules.labels.orm  # noqa: F401
    import plant_modules.packaging.orm  # noqa: F401
    import plant_modules.quality.orm  # noqa: F401
    import plant_modules.templates.orm  # noqa: F401
    import plant_modules.operations.orm  # noqa: F401
    # fmt: on
