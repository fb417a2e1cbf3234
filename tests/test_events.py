from studio_dashboard.events import AppEvents, ContractDeleted, Signal, Toast


def test_connect_is_idempotent():
    signal = Signal('demo')
    received = []

    def handler(payload):
        received.append(payload)

    signal.connect(handler)
    signal.connect(handler)
    assert signal.subscriber_count == 1

    signal.emit('x')
    assert received == ['x']


def test_disconnect_stops_delivery():
    signal = Signal('demo')
    received = []
    signal.connect(received.append)
    signal.disconnect(received.append)
    signal.disconnect(received.append)
    signal.emit('x')
    assert received == []


def test_subscribers_run_in_connection_order():
    signal = Signal('demo')
    order = []
    signal.connect(lambda payload: order.append(('first', payload)))
    signal.connect(lambda payload: order.append(('second', payload)))
    signal.emit(1)
    assert order == [('first', 1), ('second', 1)]


def test_handler_may_disconnect_during_emit():
    signal = Signal('demo')
    calls = []

    def once(payload):
        calls.append(payload)
        signal.disconnect(once)

    signal.connect(once)
    signal.emit('a')
    signal.emit('b')
    assert calls == ['a']


def test_app_events_channels_are_independent():
    bus = AppEvents()
    deleted = []
    toasts = []
    bus.contract_deleted.connect(deleted.append)
    bus.toast.connect(toasts.append)

    bus.contract_deleted.emit(ContractDeleted(contract_id='c1'))
    bus.notify('Guardado', 'success')

    assert deleted == [ContractDeleted(contract_id='c1')]
    assert toasts == [Toast(message='Guardado', kind='success')]
    assert len(bus.signals()) == 4


def test_notify_defaults_to_info():
    bus = AppEvents()
    toasts = []
    bus.toast.connect(toasts.append)
    bus.notify('Hola')
    assert toasts[0].kind == 'info'
