"""SQL for settlement records, written in the PostgreSQL dialect.

The MySQL backend rewrites these at execution time, so placeholders stay
``$n`` and identifiers stay double-quoted.
"""

REGLEMENT_TABLE = "API_user_reglement"
SALLE_TABLE = "API_salle"

# Insert/replace column order; values are built in the same order
REGLEMENT_COLUMNS = [
    "id_salle_id",
    "CONTRAT",
    "CLIENT",
    "DATE_CONTRAT",
    "DATE_DEBUT",
    "DATE_FIN",
    "USERC",
    "FAMILLE",
    "SOUSFAMILLE",
    "LIBELLE",
    "DATE_ASSURANCE",
    "MONTANT",
    "MODE",
    "TARIFAIRE",
    "DATE_REGLEMENT",
]

LIST_REGLEMENTS_SQL = f"""
    SELECT r.*, s.name as salle_name
    FROM "{REGLEMENT_TABLE}" r
    LEFT JOIN "{SALLE_TABLE}" s ON r.id_salle_id = s.id_salle
    ORDER BY r."ID_reglement" DESC
    LIMIT $1
"""

GET_REGLEMENT_WITH_SALLE_SQL = f"""
    SELECT r.*, s.name as salle_name
    FROM "{REGLEMENT_TABLE}" r
    LEFT JOIN "{SALLE_TABLE}" s ON r.id_salle_id = s.id_salle
    WHERE r."ID_reglement" = $1
"""

GET_REGLEMENT_SQL = f'SELECT * FROM "{REGLEMENT_TABLE}" WHERE "ID_reglement" = $1'

SALLE_EXISTS_SQL = f'SELECT id_salle FROM "{SALLE_TABLE}" WHERE id_salle = $1'

_QUOTED_COLUMNS = ", ".join('"%s"' % column for column in REGLEMENT_COLUMNS)
_INSERT_PLACEHOLDERS = ", ".join("$%d" % index for index in range(1, len(REGLEMENT_COLUMNS) + 1))
_REPLACE_ASSIGNMENTS = ",\n        ".join(
    '"%s" = $%d' % (column, index) for index, column in enumerate(REGLEMENT_COLUMNS, start=1)
)

INSERT_REGLEMENT_SQL = f"""
    INSERT INTO "{REGLEMENT_TABLE}" (
        {_QUOTED_COLUMNS}
    ) VALUES ({_INSERT_PLACEHOLDERS})
    RETURNING *
"""

REPLACE_REGLEMENT_SQL = f"""
    UPDATE "{REGLEMENT_TABLE}" SET
        {_REPLACE_ASSIGNMENTS}
    WHERE "ID_reglement" = ${len(REGLEMENT_COLUMNS) + 1}
    RETURNING *
"""

DELETE_REGLEMENT_SQL = f'DELETE FROM "{REGLEMENT_TABLE}" WHERE "ID_reglement" = $1 RETURNING *'


def update_reglement_sql(columns):
    """Build a partial UPDATE for ``columns``; the record id binds last."""
    set_parts = ", ".join('"%s" = $%d' % (column, index) for index, column in enumerate(columns, start=1))
    return f"""
    UPDATE "{REGLEMENT_TABLE}"
    SET {set_parts}
    WHERE "ID_reglement" = ${len(columns) + 1}
    RETURNING *
"""
