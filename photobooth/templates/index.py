from html import escape


def get_html_template(site_name: str) -> str:
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0, user-scalable=no">
        <title>{title}</title>
        <link rel="stylesheet" href="/static/css/styles.css">
    </head>
    <body>
        <!-- Idle / capture screen: click anywhere to start the next countdown -->
        <div id="idle-screen" class="screen active">
            <img id="camera-preview" src="" alt="Camera Preview" />
            <div id="idle-text" class="idle-text">Starting camera…</div>
        </div>

        <!-- Template selection: click once to select, again to confirm -->
        <div id="template-screen" class="screen">
            <h2>Pick your frame</h2>
            <p class="hint">Tap a frame to select it, tap it again to confirm</p>
            <div id="template-grid" class="template-grid"></div>
        </div>

        <!-- Result -->
        <div id="result-screen" class="screen">
            <h2>Scan to get your photos</h2>
            <div class="result-content">
                <img id="collage-image" src="" alt="Collage" />
                <img id="qr-image" src="" alt="QR code" />
            </div>
            <button id="back-btn" class="btn">Done</button>
        </div>

        <script src="/static/js/booth.js"></script>
    </body>
    </html>
    """.replace("{title}", escape(site_name))
