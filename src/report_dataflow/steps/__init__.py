"""Steps canônicos do Report DataFlow."""
