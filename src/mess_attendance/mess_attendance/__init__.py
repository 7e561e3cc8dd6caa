"""Mess Attendance package.

Validates and records meal scans for a hostel mess. Feature modules (meals,
geo, qr, attendance) hold the rules; a thin Flask controller layer sits on
top of async services and MySQL repositories.
"""
