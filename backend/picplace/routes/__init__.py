# Routes package init
"""
PicPlace Backend — API Routes Package
=======================================

Route Inventory:
    - places.py:  GET    /api/places/{pid}
                  GET    /api/places/user/{uid}
                  POST   /api/places                (multipart)
                  PATCH  /api/places/{pid}
                  DELETE /api/places/{pid}
    - users.py:   GET    /api/users
                  POST   /api/users/signup          (multipart)
                  POST   /api/users/login
    - uploads.py: GET    /uploads/images/{filename}
    - health.py:  GET    /health

Routes are thin: extract request data, call a service, wrap the result in
a {"message": ..., <payload>} envelope. Errors are mapped in main.py.
"""
