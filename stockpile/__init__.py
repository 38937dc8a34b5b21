"""stockpile - Emergency food stockpile tracker living in LINE."""
