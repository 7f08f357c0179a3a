from flutter_riverpod import ConsumerWidget, WidgetRef
from shop import providers
from shop.providers import Catalog, summary as cart_summary


class CartView(ConsumerWidget):
    def build(self, context, ref: WidgetRef):
        ref.listen(providers.discount, lambda previous, current: None)
        product = ref.watch(Catalog.product(42))
        on_clear = lambda: ref.read(providers.cart_total.notifier).clear()
        return [ref.watch(cart_summary), product, on_clear]


class Banner:
    def build(self, ref):
        return ref.watch(providers.discount)
