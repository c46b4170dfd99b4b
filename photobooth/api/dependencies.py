from photobooth.services.booth import booth_service
from photobooth.services.storage import photo_storage

def get_booth_service():
    return booth_service

def get_photo_storage():
    return photo_storage
