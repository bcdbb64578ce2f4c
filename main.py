import uvicorn

import config

# ==========================================
# MAIN APPLICATION
# ==========================================

def main():
    print("--- CAMPUS WELLBEING POINTS API ---")

    # 1. Initialize Infrastructure
    try:
        config.get_repository()
        print(f"[OK] Document store ready (APP_ENV={config.APP_ENV})")
    except Exception as e:
        print(f"[ERROR] Initialization failed: {e}")
        raise

    # 2. Launch the HTTP API
    print(f"[SYSTEM] Serving on http://{config.API_HOST}:{config.API_PORT}")
    uvicorn.run("api:app", host=config.API_HOST, port=config.API_PORT)

if __name__ == "__main__":
    main()
