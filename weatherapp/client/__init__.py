"""View-layer logic: identity, city list, weather loading, carousel, saved places."""
