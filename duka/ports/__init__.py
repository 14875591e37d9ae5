"""DIP Ports – the interfaces services depend on."""
