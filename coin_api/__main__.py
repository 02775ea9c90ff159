from coin_api.main import run

run()
