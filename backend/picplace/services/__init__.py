# Services package init
"""
PicPlace Backend — Services Layer
===================================

Business logic between routes (HTTP) and the repository (persistence).

Service Inventory:
    - PlaceService: place lookups and create/update/delete with the paired
      write on the creator's places list
    - UserService: list users, signup, login
    - CredentialService: bcrypt password digests and signed bearer tokens
    - GeocodingService (abstract) / NominatimGeocoder: address → coordinates
    - FileService: image validation, storage and cleanup

Each module exposes a singleton (`place_service`, `user_service`, ...);
tests patch those or construct their own instances.
"""
