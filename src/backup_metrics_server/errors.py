class ListenerBindError(RuntimeError):
    """Ein Listener konnte seinen Port nicht binden. Einziger fataler Fehler beim Start."""

    def __init__(self, port: int):
        super().__init__(f"Error listening on port {port}")
        self.port = port
