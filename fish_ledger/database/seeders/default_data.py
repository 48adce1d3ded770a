DEFAULT_VARIETIES = (
    ("RC", "Rupchand"),
    ("ROHU", "Rohu"),
    ("CATLA", "Catla"),
)


def seed(conn):
    # only on an empty variety table, so renamed/removed defaults stay that way
    row = conn.execute("SELECT COUNT(*) AS n FROM fish_varieties").fetchone()
    if row and row["n"] == 0:
        conn.executemany(
            "INSERT INTO fish_varieties(code, name) VALUES (?, ?)",
            DEFAULT_VARIETIES,
        )
