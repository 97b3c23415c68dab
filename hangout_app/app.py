from hangout_app import app

if __name__ == "__main__":
  # To test error logging locally set `debug=False`, `use_debugger=False`.
  app.run(
    debug=True,
    host='localhost',
    port='8080')
