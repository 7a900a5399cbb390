"""
Metric writers: the output channel the collectors emit observations into.

- base.py: Writer interface
- prometheus_writer.py: builds prometheus_client metric families for a scrape
"""
