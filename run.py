import uvicorn
from photobooth.config import settings

if __name__ == "__main__":
    print("Starting Kiosk Photobooth Server...")
    print(f"Open the kiosk page at: http://{settings.host}:{settings.port}")
    print(f"Photos will be saved to: {settings.photos_dir}")
    print(f"Booth configuration: {settings.booth_config_path}")
    print("\nPress Ctrl+C to stop the server\n")

    uvicorn.run(
        "photobooth.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
