# 📄 File: app/modules/plant_identification/presentation/__init__.py
# 🧭 Purpose (Layman Explanation):
# Where the plant identification module meets the outside world over HTTP.
# 🧪 Purpose (Technical Summary):
# Presentation layer: FastAPI routers, request schemas and dependencies.
# 🔗 Dependencies:
# FastAPI, slowapi
# 🔄 Connected Modules / Calls From:
# app.main, app.api.v1.router
