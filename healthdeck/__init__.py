"""healthdeck — resource health evaluation, summaries and alert gating."""
