"""Cross-cutting helpers: logging, telemetry and exceptions."""
