# All application routes are versioned and live in v1/
