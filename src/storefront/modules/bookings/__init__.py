"""Bookings module: reservations, appointments and portal customers."""
