# 📄 File: app/modules/plant_identification/presentation/api/__init__.py
# 🧭 Purpose (Layman Explanation):
# The web-facing side of the plant identification module.
# 🧪 Purpose (Technical Summary):
# API package: request schemas and versioned routers.
# 🔗 Dependencies:
# FastAPI
# 🔄 Connected Modules / Calls From:
# app.api.v1.router
