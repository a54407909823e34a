"""Version 1 endpoints: health, timeline pricing, surge and scenarios."""
