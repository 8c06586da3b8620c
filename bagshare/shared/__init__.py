"""Cross-cutting helpers shared by every Bagshare layer."""
