"""Shared state of the shop."""
from riverpod import Provider, StateProvider, NotifierProvider, Notifier, Ref


cart_items = StateProvider(lambda ref: [])
discount = StateProvider(lambda ref: 0)


class CartTotal(Notifier):
    def build(self):
        items = self.ref.watch(cart_items)
        return sum(items) - self.ref.watch(discount)

    def clear(self):
        self.ref.read(cart_items.notifier).state = []


cart_total = NotifierProvider(CartTotal)


def _summary(ref: Ref) -> str:
    total = ref.watch(cart_total)
    count = ref.watch(cart_items.select(len))
    return f"{count} items, {total}"


summary = Provider(_summary)


class Catalog:
    product = Provider.family(lambda ref, product_id: product_id)
    featured = Provider(lambda ref: ref.watch(Catalog.product(1)))
