# 📄 File: app/modules/plant_identification/application/__init__.py
# 🧭 Purpose (Layman Explanation):
# The use cases of the plant identification module: what users can ask for
# and who carries it out.
# 🧪 Purpose (Technical Summary):
# Application layer (CQRS): commands, queries, handlers and DTOs.
# 🔗 Dependencies:
# app.modules.plant_identification.domain
# 🔄 Connected Modules / Calls From:
# app.modules.plant_identification.presentation

"""
Plant Identification Application Layer

- commands/: write-side requests (sightings, identification, enhancement, tours)
- queries/: read-side requests (search, reads, entitlements)
- handlers/: one handler per command/query
- dto/: response shapes shared with the presentation layer
"""
