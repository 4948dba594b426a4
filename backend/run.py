from uno_server import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Socket.IO's own server so websocket upgrades work in dev
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], debug=True)
