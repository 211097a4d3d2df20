"""Care application for the VoCare backend.

Appointment engine, patient records, lookups and the REST endpoints
the browser client talks to.
"""
