# Supabase table: applications
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- workshop_id: uuid (foreign key to workshops.id, not null)
- student_id: uuid (foreign key to users.id, not null)
- responses: text (not null, default: '{}') - serialized map of form field id -> answer
- status: text (not null, default: 'pending') - values: pending, approved, rejected
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

A student may apply to the same workshop more than once; nothing enforces
uniqueness of (workshop_id, student_id).

Supabase table: payments (not used by the API yet)
- id: uuid (primary key)
- application_id: uuid (foreign key to applications.id)
- amount: integer
- status: text - values: pending, completed, failed
- stripe_payment_id: text (nullable)
- created_at: timestamp (default: now())
"""
