from mobytranscript import create_app

app = create_app()
