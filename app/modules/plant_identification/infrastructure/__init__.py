# 📄 File: app/modules/plant_identification/infrastructure/__init__.py
# 🧭 Purpose (Layman Explanation):
# How the plant identification module actually stores data and talks to
# PlantNet, Gemini and Supabase.
# 🧪 Purpose (Technical Summary):
# Infrastructure layer: SQLAlchemy models and repositories (database/) and
# provider/storage adapters (external/).
# 🔗 Dependencies:
# SQLAlchemy, aiohttp, supabase
# 🔄 Connected Modules / Calls From:
# presentation dependencies, app.main, migrations
