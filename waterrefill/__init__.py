"""Water refill station finder backend."""
