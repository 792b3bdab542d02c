#!/usr/bin/env python3
"""
Script de pruebas contra una instancia en ejecución del módulo Orders
Ejecutar desde la raíz del proyecto: python scripts/smoke_test_orders.py [BASE_URL]
"""

import sys
import asyncio

import httpx

# Configuración de la API
BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"
ORIGIN = ["22.3376459", "114.1474979"]
DESTINATION = ["22.3292858", "114.1470621"]
CONCURRENT_CLAIMS = 10

class OrdersTester:
    def __init__(self):
        self.client = httpx.AsyncClient(base_url=BASE_URL, timeout=30)

    async def test_place_order(self):
        """Crear una orden"""
        print("\n📋 Test: Crear orden")
        response = await self.client.post(
            "/order", json={"origin": ORIGIN, "destination": DESTINATION}
        )
        if response.status_code != 200:
            print(f"❌ Error creando orden: {response.status_code}")
            print(f"   Response: {response.text}")
            return None

        data = response.json()
        print(f"✅ Orden creada: ID {data['id']}")
        print(f"   Distancia: {data['distance']}m")
        print(f"   Estado: {data['status']}")
        return data['id'] if data['status'] == "UNASSIGN" else None

    async def test_invalid_order(self):
        """Coordenadas incompletas deben dar 400"""
        print("\n🚫 Test: Orden con coordenadas inválidas")
        response = await self.client.post(
            "/order", json={"origin": ["22.33"], "destination": DESTINATION}
        )
        ok = response.status_code == 400 and response.json() == {"error": "Bad Request"}
        print(f"{'✅' if ok else '❌'} Respuesta: {response.status_code} {response.text}")
        return ok

    async def test_concurrent_claims(self, order_id: int):
        """Varios corredores toman la misma orden a la vez: solo uno gana"""
        print(f"\n🚚 Test: {CONCURRENT_CLAIMS} reclamos concurrentes sobre la orden {order_id}")
        responses = await asyncio.gather(*[
            self.client.put(f"/order/{order_id}", json={"status": "taken"})
            for _ in range(CONCURRENT_CLAIMS)
        ])
        codes = sorted(r.status_code for r in responses)
        print(f"   Códigos: {codes}")

        ok = codes.count(200) == 1 and codes.count(409) == CONCURRENT_CLAIMS - 1
        print(f"{'✅' if ok else '❌'} Exactamente un reclamo exitoso")
        return ok

    async def test_unknown_order(self):
        """Tomar una orden inexistente debe dar 404"""
        print("\n🔍 Test: Tomar orden inexistente")
        response = await self.client.put("/order/999999999", json={"status": "taken"})
        ok = response.status_code == 404
        print(f"{'✅' if ok else '❌'} Respuesta: {response.status_code} {response.text}")
        return ok

    async def test_list_orders(self, order_id: int):
        """Listar órdenes y verificar orden ascendente"""
        print("\n📄 Test: Listar órdenes")
        ok = True
        for limit in (0, 1001):
            response = await self.client.get("/orders", params={"page": 0, "limit": limit})
            if response.status_code != 400:
                print(f"❌ limit={limit} debería dar 400, dio {response.status_code}")
                ok = False

        response = await self.client.get("/orders", params={"page": 0, "limit": 1000})
        if response.status_code != 200:
            print(f"❌ Error listando: {response.status_code} {response.text}")
            return False

        orders = response.json()
        ids = [o['id'] for o in orders]
        if ids != sorted(ids):
            print("❌ Las órdenes no vienen ordenadas por id")
            ok = False
        taken = next((o for o in orders if o['id'] == order_id), None)
        if taken and taken['status'] != "taken":
            print(f"❌ La orden {order_id} debería estar 'taken'")
            ok = False

        print(f"{'✅' if ok else '❌'} {len(orders)} órdenes listadas")
        return ok

    async def run_complete_workflow_test(self):
        order_id = await self.test_place_order()
        if order_id is None:
            return False

        results = [
            await self.test_invalid_order(),
            await self.test_concurrent_claims(order_id),
            await self.test_unknown_order(),
            await self.test_list_orders(order_id),
        ]
        return all(results)

    async def cleanup(self):
        """Limpiar recursos"""
        await self.client.aclose()

async def main():
    """Función principal"""
    tester = OrdersTester()

    try:
        success = await tester.run_complete_workflow_test()
        print("\n🎯 TODOS LOS TESTS PASARON" if success else "\n❌ ALGUNOS TESTS FALLARON")
        return 0 if success else 1
    except httpx.HTTPError as e:
        print(f"\n❌ Error de conexión con {BASE_URL}: {e}")
        return 1
    finally:
        await tester.cleanup()

if __name__ == "__main__":
    print("🧪 INICIANDO TESTS DEL MÓDULO ORDERS")
    print("📋 Asegúrate de que:")
    print(f"   - El servidor esté corriendo en {BASE_URL}")
    print("   - MAPS_API_KEY esté configurada en el servidor")
    print()

    sys.exit(asyncio.run(main()))
