# Supabase table: workshops
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- master_id: uuid (foreign key to users.id, not null) - the owning master
- title: text (not null)
- description: text (not null)
- category: text (not null)
- location: text (not null)
- price: integer (nullable) - null means free
- capacity: integer (nullable) - null means unlimited
- schedule_type: text (nullable) - values: fixed, flexible
- start_date: timestamp (nullable)
- end_date: timestamp (nullable)
- application_form: text (not null, default: '[]') - serialized list of form fields
- image_url: text (nullable)
- form_color: text (nullable) - accent color, '#3B82F6' when null
- auto_approve: boolean (not null, default: false)
- status: text (not null, default: 'draft') - values: draft, published, cancelled
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Storage bucket: workshop-images (public read) holds cover images; image_url
points at the uploaded object.
"""
